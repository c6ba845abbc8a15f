"""Enumerations shared by the service domain"""

from enum import Enum


class ServiceType(str, Enum):
    """How a service is billed"""

    TIME_BASED = "Time-Based"  # per hour, day, session
    PROJECT_BASED = "Project-Based"  # fixed fee per project
    USAGE_BASED = "Usage-Based"  # per unit of consumption
    OTHER = "Other"


class ServiceStatus(str, Enum):
    DRAFT = "Draft"
    ACTIVE = "Active"
    FULLY_BOOKED = "Fully Booked"
    DISCONTINUED = "Discontinued"


class ServiceVisibility(str, Enum):
    PRIVATE = "Private"
    PUBLIC = "Public"


class RateUnit(str, Enum):
    """Billing unit of a service rate"""

    PER_HOUR = "Per Hour"
    PER_DAY = "Per Day"
    PER_SESSION = "Per Session"
    FIXED = "Per Fixed"
    PER_UNIT = "Per Unit"


class CapacityPeriodResizeMode(str, Enum):
    """Strategy used when a capacity plan is moved onto a new period"""

    DEFAULT = "default"  # trim or pad, keep per-month units
    DISTRIBUTE = "distribute"  # keep total units, spread evenly
