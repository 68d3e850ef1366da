from pakproperty.client.api import ApiClient
from pakproperty.client.cache import QueryCache
from pakproperty.client.notify import LogNotifier, Notifier
from pakproperty.client.store import ImageUpload, PropertyStore, SearchFilters

__all__ = ["ApiClient", "ImageUpload", "LogNotifier", "Notifier", "PropertyStore", "QueryCache", "SearchFilters"]
