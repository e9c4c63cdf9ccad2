"""Organization, contractor relationship, and approval policy enums."""

from enum import Enum


class Role(str, Enum):
    """Caller roles resolved upstream by the authenticating handler."""

    CONTRACTOR = "contractor"
    TENANT = "tenant"
    OWNER = "owner"
    ADMIN = "admin"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


class OrgLinkStatus(str, Enum):
    """Contractor ↔ organization relationship status."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class InvolvementMode(str, Enum):
    """
    How involved an owner wants to be in approving appointments.

    Only seeds policy defaults; never read by the evaluator.
    """

    HANDS_OFF = "hands-off"
    BALANCED = "balanced"
    HANDS_ON = "hands-on"
