"""Business rule configuration"""
from pydantic import BaseModel


class BusinessRules(BaseModel):
    """Business rules configuration"""
    # Slot table (shared by every doctor)
    SLOT_START_HOUR: int = 8
    SLOT_END_HOUR: int = 17  # exclusive
    SLOT_DURATION_MINUTES: int = 30

    # Pharmacy rules
    DEFAULT_REORDER_LEVEL: int = 10
    EXPIRING_SOON_DAYS: int = 30

    # Identifiers
    ID_SUFFIX_WIDTH: int = 3

    # Credential rules
    MIN_USERNAME_LENGTH: int = 3
    MAX_USERNAME_LENGTH: int = 50
    MIN_PASSWORD_LENGTH: int = 6
    MAX_PASSWORD_LENGTH: int = 100


# Global instance
business_rules = BusinessRules()


def get_business_rules() -> BusinessRules:
    """Get current business rules"""
    return business_rules


def update_business_rule(key: str, value) -> None:
    """Update a business rule"""
    if hasattr(business_rules, key):
        setattr(business_rules, key, value)
    else:
        raise ValueError(f"Unknown business rule: {key}")
