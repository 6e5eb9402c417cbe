"""Date and time validation utilities"""
import re
from datetime import datetime, timedelta

DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
TIME_PATTERN = re.compile(r'^\d{2}:\d{2}$')

MIN_YEAR = 1900
MAX_YEAR = 2100


def is_valid_date(date_str: str) -> bool:
    """Check a YYYY-MM-DD string for syntax and calendar range"""
    if not date_str or not DATE_PATTERN.match(date_str):
        return False
    try:
        parsed = datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        return False
    return MIN_YEAR <= parsed.year <= MAX_YEAR


def is_valid_time(time_str: str) -> bool:
    """Check a zero-padded HH:MM string"""
    if not time_str or not TIME_PATTERN.match(time_str):
        return False
    hour, minute = int(time_str[:2]), int(time_str[3:])
    return 0 <= hour <= 23 and 0 <= minute <= 59


def compare_dates(first: str, second: str) -> int:
    """Compare two YYYY-MM-DD strings; returns -1, 0 or 1"""
    if first < second:
        return -1
    if first > second:
        return 1
    return 0


def add_days(date_str: str, days: int) -> str:
    return (datetime.strptime(date_str, "%Y-%m-%d").date() + timedelta(days=days)).isoformat()


class Clock:
    """Current date/time provider"""

    def now(self) -> datetime:
        return datetime.now()

    def today(self) -> str:
        return self.now().strftime("%Y-%m-%d")

    def current_time(self) -> str:
        return self.now().strftime("%H:%M")


class FixedClock(Clock):
    """Clock frozen at a given moment; used for deterministic scheduling"""

    def __init__(self, moment: datetime):
        self.moment = moment

    def now(self) -> datetime:
        return self.moment

    def advance(self, **kwargs) -> None:
        self.moment = self.moment + timedelta(**kwargs)


system_clock = Clock()
