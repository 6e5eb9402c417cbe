from enum import Enum
from typing import ClassVar, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from medrecords.validators.time_validator import add_days, compare_dates, is_valid_date, is_valid_time


FIELD_DELIMITER = "|"
LIST_DELIMITER = ","
ITEM_DELIMITER = ";"
ITEM_FIELD_DELIMITER = ":"


class Role(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"
    UNKNOWN = "unknown"


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    UNKNOWN = "unknown"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"
    UNKNOWN = "Unknown"


class Record(BaseModel):
    """Base for every persisted entity: one record is one line of its data file"""
    model_config = ConfigDict(validate_assignment=True)

    id_field: ClassVar[str] = ""
    forbidden_chars: ClassVar[str] = FIELD_DELIMITER + "\n\r"

    @field_validator("*", mode="after")
    @classmethod
    def check_no_delimiters(cls, value):
        if isinstance(value, str) and any(ch in value for ch in cls.forbidden_chars):
            raise ValueError(f"value must not contain any of {cls.forbidden_chars!r}")
        return value

    @property
    def entity_id(self) -> str:
        return getattr(self, self.id_field)


def optional_date(value: str) -> str:
    if value and not is_valid_date(value):
        raise ValueError(f"invalid date '{value}', expected YYYY-MM-DD")
    return value


class Account(Record):
    id_field: ClassVar[str] = "username"

    username: str = Field(min_length=1)
    password_hash: str = Field(min_length=1)
    role: Role
    is_active: bool = True
    created_date: str = ""

    @field_validator("created_date")
    @classmethod
    def check_created_date(cls, value: str) -> str:
        return optional_date(value)


class Patient(Record):
    id_field: ClassVar[str] = "patient_id"

    patient_id: str = Field(min_length=1)
    username: str = Field(min_length=1)
    name: str = ""
    phone: str = ""
    gender: Gender = Gender.UNKNOWN
    date_of_birth: str = ""
    address: str = ""
    medical_history: str = ""

    @field_validator("date_of_birth")
    @classmethod
    def check_date_of_birth(cls, value: str) -> str:
        return optional_date(value)


class Doctor(Record):
    id_field: ClassVar[str] = "doctor_id"

    doctor_id: str = Field(min_length=1)
    username: str = Field(min_length=1)
    name: str = ""
    phone: str = ""
    gender: Gender = Gender.UNKNOWN
    date_of_birth: str = ""
    specialization: str = ""
    schedule: str = ""
    consultation_fee: float = Field(default=0.0, ge=0)

    @field_validator("date_of_birth")
    @classmethod
    def check_date_of_birth(cls, value: str) -> str:
        return optional_date(value)


class Appointment(Record):
    id_field: ClassVar[str] = "appointment_id"

    appointment_id: str = Field(min_length=1)
    patient_username: str = Field(min_length=1)
    doctor_id: str = Field(min_length=1)
    date: str
    time: str
    disease: str = ""
    price: float = Field(default=0.0, ge=0)
    is_paid: bool = False
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: str = ""

    @field_validator("date")
    @classmethod
    def check_date(cls, value: str) -> str:
        if not is_valid_date(value):
            raise ValueError(f"invalid date '{value}', expected YYYY-MM-DD")
        return value

    @field_validator("time")
    @classmethod
    def check_time(cls, value: str) -> str:
        if not is_valid_time(value):
            raise ValueError(f"invalid time '{value}', expected HH:MM")
        return value

    @property
    def occupies_slot(self) -> bool:
        return self.status != AppointmentStatus.CANCELLED

    def same_slot(self, other: "Appointment") -> bool:
        return (self.doctor_id, self.date, self.time) == (other.doctor_id, other.date, other.time)


class Medicine(Record):
    id_field: ClassVar[str] = "medicine_id"

    medicine_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    generic_name: str = ""
    category: str = ""
    manufacturer: str = ""
    description: str = ""
    unit_price: float = Field(default=0.0, ge=0)
    quantity_in_stock: int = Field(default=0, ge=0)
    reorder_level: int = Field(default=10, ge=0)
    expiry_date: str = ""
    dosage_form: str = ""
    strength: str = ""

    @field_validator("expiry_date")
    @classmethod
    def check_expiry_date(cls, value: str) -> str:
        return optional_date(value)

    @property
    def identity_key(self) -> tuple:
        """Case/whitespace-insensitive (name, manufacturer) pair"""
        return (self.name.strip().casefold(), self.manufacturer.strip().casefold())

    def is_low_stock(self) -> bool:
        return self.quantity_in_stock <= self.reorder_level

    def is_expired(self, today: str) -> bool:
        # Still valid on the expiry date itself
        if not self.expiry_date:
            return False
        return compare_dates(self.expiry_date, today) < 0

    def is_expiring_soon(self, today: str, days: int) -> bool:
        if not self.expiry_date or self.is_expired(today):
            return False
        return compare_dates(self.expiry_date, add_days(today, days)) <= 0


class PrescriptionItem(Record):
    forbidden_chars: ClassVar[str] = FIELD_DELIMITER + ITEM_DELIMITER + ITEM_FIELD_DELIMITER + "\n\r"

    medicine_id: str = Field(min_length=1)
    medicine_name: str = ""
    quantity: int = Field(gt=0)
    dosage: str = ""
    duration: str = ""
    instructions: str = ""


class Prescription(Record):
    id_field: ClassVar[str] = "prescription_id"

    prescription_id: str = Field(min_length=1)
    appointment_id: str = ""
    patient_username: str = Field(min_length=1)
    doctor_id: str = Field(min_length=1)
    prescription_date: str = ""
    diagnosis: str = ""
    notes: str = ""
    is_dispensed: bool = False
    items: List[PrescriptionItem] = Field(default_factory=list)

    @field_validator("prescription_date")
    @classmethod
    def check_prescription_date(cls, value: str) -> str:
        return optional_date(value)

    @field_validator("items")
    @classmethod
    def merge_duplicate_items(cls, items: List[PrescriptionItem]) -> List[PrescriptionItem]:
        """One item per medicine: a later item replaces an earlier one in place, as add_item does"""
        positions: Dict[str, int] = {}
        merged: List[PrescriptionItem] = []
        for item in items:
            if item.medicine_id in positions:
                merged[positions[item.medicine_id]] = item
            else:
                positions[item.medicine_id] = len(merged)
                merged.append(item)
        return merged

    def add_item(self, item: PrescriptionItem) -> None:
        """Add an item; an existing item for the same medicine is replaced in place"""
        items = list(self.items)
        for index, existing in enumerate(items):
            if existing.medicine_id == item.medicine_id:
                items[index] = item
                break
        else:
            items.append(item)
        self.items = items

    def remove_item(self, medicine_id: str) -> bool:
        remaining = [item for item in self.items if item.medicine_id != medicine_id]
        removed = len(remaining) != len(self.items)
        self.items = remaining
        return removed

    def clear_items(self) -> None:
        self.items = []

    def has_medicine(self, medicine_id: str) -> bool:
        return any(item.medicine_id == medicine_id for item in self.items)


class Department(Record):
    id_field: ClassVar[str] = "department_id"

    department_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    head_doctor_id: str = ""
    doctor_ids: List[str] = Field(default_factory=list)
    location: str = ""
    phone: str = ""

    @field_validator("doctor_ids")
    @classmethod
    def check_members(cls, value: List[str]) -> List[str]:
        members: List[str] = []
        for doctor_id in value:
            if LIST_DELIMITER in doctor_id or FIELD_DELIMITER in doctor_id:
                raise ValueError(f"doctor id '{doctor_id}' contains a delimiter")
            if doctor_id and doctor_id not in members:
                members.append(doctor_id)
        return members

    def has_doctor(self, doctor_id: str) -> bool:
        return doctor_id in self.doctor_ids

    def add_doctor(self, doctor_id: str) -> bool:
        if self.has_doctor(doctor_id):
            return False
        self.doctor_ids = self.doctor_ids + [doctor_id]
        return True

    def remove_doctor(self, doctor_id: str) -> bool:
        if not self.has_doctor(doctor_id):
            return False
        self.doctor_ids = [d for d in self.doctor_ids if d != doctor_id]
        return True
