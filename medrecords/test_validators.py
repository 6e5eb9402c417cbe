import pytest

from medrecords.services.booking import standard_slots
from medrecords.validators.business_rules import get_business_rules, update_business_rule
from medrecords.validators.password_validator import CredentialValidator, is_valid_phone
from medrecords.validators.time_validator import add_days, compare_dates, is_valid_date, is_valid_time


@pytest.mark.parametrize("value,expected", [
    ("2026-03-10", True),
    ("2024-02-29", True),
    ("2026-02-29", False),
    ("1899-12-31", False),
    ("2101-01-01", False),
    ("2026-3-10", False),
    ("", False),
])
def test_is_valid_date(value, expected):
    assert is_valid_date(value) is expected


@pytest.mark.parametrize("value,expected", [
    ("00:00", True),
    ("23:59", True),
    ("24:00", False),
    ("12:60", False),
    ("9:30", False),
])
def test_is_valid_time(value, expected):
    assert is_valid_time(value) is expected


def test_date_helpers():
    assert compare_dates("2026-03-09", "2026-03-10") == -1
    assert compare_dates("2026-03-10", "2026-03-10") == 0
    assert add_days("2026-12-31", 1) == "2027-01-01"


def test_credentials():
    assert CredentialValidator.validate_username("alice.b_1") == (True, "")
    assert not CredentialValidator.validate_username("al")[0]
    assert not CredentialValidator.validate_password("pa|ssword")[0]
    assert is_valid_phone("0901234567")
    assert not is_valid_phone("901234567")
    assert not is_valid_phone("")


def test_business_rules_drive_slot_table():
    rules = get_business_rules()
    original = rules.SLOT_END_HOUR
    try:
        update_business_rule("SLOT_END_HOUR", 10)
        assert standard_slots() == ["08:00", "08:30", "09:00", "09:30"]
    finally:
        update_business_rule("SLOT_END_HOUR", original)
    with pytest.raises(ValueError):
        update_business_rule("NO_SUCH_RULE", 1)
