"""Sequential ID generation (P001, D002, APT010, ...)"""
import re
from typing import Iterable

from medrecords.validators.business_rules import get_business_rules

PATIENT_PREFIX = "P"
DOCTOR_PREFIX = "D"
APPOINTMENT_PREFIX = "APT"
MEDICINE_PREFIX = "MED"
PRESCRIPTION_PREFIX = "PRE"
DEPARTMENT_PREFIX = "DEP"


def next_id(prefix: str, existing_ids: Iterable[str], width: int = 0) -> str:
    """
    Next ID for a prefix: one more than the highest numeric suffix among IDs of the
    form <prefix><digits>, zero-padded to width. IDs that don't match are ignored.
    """
    width = width or get_business_rules().ID_SUFFIX_WIDTH
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    highest = 0
    for existing in existing_ids:
        match = pattern.match(existing)
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}{highest + 1:0{width}d}"
