from enum import Enum

from pakproperty.models.enums import Role

class Capability(str, Enum):
    MANAGE_LISTINGS = "manage_listings"
    SAVE_LISTINGS = "save_listings"
    SEND_INQUIRIES = "send_inquiries"
    ADMINISTER = "administer"

_CAPABILITIES = {
    Role.OWNER: {Capability.MANAGE_LISTINGS, Capability.SAVE_LISTINGS, Capability.SEND_INQUIRIES},
    Role.AGENT: {Capability.MANAGE_LISTINGS, Capability.SAVE_LISTINGS, Capability.SEND_INQUIRIES},
    Role.TENANT: {Capability.SAVE_LISTINGS, Capability.SEND_INQUIRIES},
    Role.ADMIN: set(Capability),
}

def has_capability(role, capability: Capability) -> bool:
    try:
        role = Role(role)
    except ValueError:
        return False
    return capability in _CAPABILITIES[role]

def can_manage_property(user, prop) -> bool:
    """Owner, assigned agent, or an administrator."""
    if has_capability(user.role, Capability.ADMINISTER):
        return True
    if not has_capability(user.role, Capability.MANAGE_LISTINGS):
        return False
    return user.id in (prop.owner_id, prop.agent_id)

def can_handle_inquiry(user, inquiry) -> bool:
    """The listing owner the inquiry was sent to, or an administrator."""
    return has_capability(user.role, Capability.ADMINISTER) or user.id == inquiry.owner_id

def can_view_inquiry(user, inquiry) -> bool:
    return user.id == inquiry.tenant_id or can_handle_inquiry(user, inquiry)
