from enum import Enum


class AirlineStatus(str, Enum):
    PRODUCTION = "Production"
    PILOT = "Pilot"
    DEVELOPMENT = "Development"
    INACTIVE = "Inactive"


class FeatureCategory(str, Enum):
    SHOPPING = "Shopping"
    GLOBAL = "Global"
    BOOKING = "Booking"
    SERVICING = "Servicing"
    PAYMENT = "Payment"


def _sql_values(enum_cls) -> str:
    return ", ".join(f"'{member.value}'" for member in enum_cls)


AIRLINE_STATUS_SQL = _sql_values(AirlineStatus)
FEATURE_CATEGORY_SQL = _sql_values(FeatureCategory)
