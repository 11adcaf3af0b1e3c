"""Domain enumerations for PropertyHub.

All enums use the (str, Enum) pattern to ensure JSON serialization compatibility.
"""

from enum import Enum


class UserRole(str, Enum):
    """Role a user registers with. Fixed at creation."""

    BROKER = "broker"
    OWNER = "owner"
    ADMIN = "admin"


class PropertyType(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    LAND = "land"


class ListingType(str, Enum):
    """Governs price display: sale/lease show a range, rent a fixed monthly price."""

    SALE = "sale"
    RENT = "rent"
    LEASE = "lease"


class PropertyStatus(str, Enum):
    AVAILABLE = "available"
    RENTED = "rented"
    SOLD = "sold"


class LeadType(str, Enum):
    """Kind of inbound lead. CONTACT comes from the general contact form."""

    PROPERTY_INQUIRY = "property_inquiry"
    INTERIOR_DESIGN = "interior_design"
    CONTACT = "contact"


class LeadStatus(str, Enum):
    """CRM status of a lead. Any status may move to any other."""

    NEW = "new"
    CONTACTED = "contacted"
    IN_PROGRESS = "in_progress"
    QUALIFIED = "qualified"
    CLOSED_WON = "closed_won"
    CLOSED_LOST = "closed_lost"


class SortOption(str, Enum):
    """Orderings offered by the listing search."""

    NEWEST = "newest"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    AREA_ASC = "area-asc"
    AREA_DESC = "area-desc"
