from enum import Enum

class Role(str, Enum):
    OWNER = "owner"
    AGENT = "agent"
    TENANT = "tenant"
    ADMIN = "admin"

class PropertyStatus(str, Enum):
    AVAILABLE = "available"
    RENTED = "rented"
    SOLD = "sold"
    UNDER_MAINTENANCE = "under-maintenance"
    RESERVED = "reserved"

class PropertyType(str, Enum):
    APARTMENT = "apartment"
    HOUSE = "house"
    VILLA = "villa"
    COMMERCIAL = "commercial"
    OFFICE = "office"
    SHOP = "shop"
    WAREHOUSE = "warehouse"
    PLOT = "plot"
    ROOM = "room"
    PORTION = "portion"

class Category(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"
    AGRICULTURAL = "agricultural"

class RentType(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"

class Currency(str, Enum):
    PKR = "PKR"
    USD = "USD"

class City(str, Enum):
    KARACHI = "Karachi"
    LAHORE = "Lahore"
    ISLAMABAD = "Islamabad"
    RAWALPINDI = "Rawalpindi"
    FAISALABAD = "Faisalabad"
    MULTAN = "Multan"
    PESHAWAR = "Peshawar"
    QUETTA = "Quetta"
    OTHER = "Other"

class AreaUnit(str, Enum):
    MARLA = "marla"
    KANAL = "kanal"
    SQFT = "sqft"
    SQYARD = "sqyard"
    ACRE = "acre"

class Furnishing(str, Enum):
    UNFURNISHED = "unfurnished"
    SEMI_FURNISHED = "semi-furnished"
    FULLY_FURNISHED = "fully-furnished"

class Condition(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    NEEDS_RENOVATION = "needs-renovation"

class SortOrder(str, Enum):
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    SIZE_ASC = "size-asc"
    SIZE_DESC = "size-desc"
    NEWEST = "newest"

class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"

class Language(str, Enum):
    EN = "en"
    UR = "ur"

class InquiryType(str, Enum):
    GENERAL = "general"
    VIEWING = "viewing"
    RENTAL = "rental"
    QUESTION = "question"

class InquiryStatus(str, Enum):
    PENDING = "pending"
    RESPONDED = "responded"
    VIEWING_SCHEDULED = "viewing-scheduled"
    RENTED = "rented"
    REJECTED = "rejected"
    EXPIRED = "expired"

OPEN_INQUIRY_STATUSES = (InquiryStatus.PENDING, InquiryStatus.RESPONDED, InquiryStatus.VIEWING_SCHEDULED)

class NextAction(str, Enum):
    SCHEDULE_VIEWING = "schedule-viewing"
    SEND_DOCUMENTS = "send-documents"
    NEGOTIATE_PRICE = "negotiate-price"
    REJECT = "reject"
    ACCEPT = "accept"

class Employment(str, Enum):
    EMPLOYED = "employed"
    SELF_EMPLOYED = "self-employed"
    STUDENT = "student"
    RETIRED = "retired"
    OTHER = "other"
