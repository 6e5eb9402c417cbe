from typing import Optional, List
from pydantic import BaseModel, Field

from medrecords.models import Account, Gender, Role


# Request schemas
class RegisterRequest(BaseModel):
    username: str
    password: str
    role: Role = Role.PATIENT
    name: str = ""
    phone: str = ""
    gender: Gender = Gender.UNKNOWN
    date_of_birth: str = ""
    address: str = ""
    medical_history: str = ""
    specialization: str = ""
    schedule: str = ""
    consultation_fee: float = 0.0


class LoginRequest(BaseModel):
    username: str
    password: str


class PasswordChange(BaseModel):
    old_password: str
    new_password: str


class BookingRequest(BaseModel):
    doctor_id: str
    date: str
    time: str
    disease: str = ""
    notes: str = ""
    patient_username: Optional[str] = None


class RescheduleRequest(BaseModel):
    date: str
    time: str


class PrescriptionCreate(BaseModel):
    appointment_id: str
    diagnosis: str = ""
    notes: str = ""


class PrescriptionItemRequest(BaseModel):
    medicine_id: str
    quantity: int = Field(gt=0)
    dosage: str = ""
    duration: str = ""
    instructions: str = ""


class MedicineCreate(BaseModel):
    name: str
    manufacturer: str = ""
    generic_name: str = ""
    category: str = ""
    description: str = ""
    unit_price: float = Field(default=0.0, ge=0)
    quantity: int = Field(default=0, ge=0)
    reorder_level: Optional[int] = Field(default=None, ge=0)
    expiry_date: str = ""
    dosage_form: str = ""
    strength: str = ""


class StockAdjust(BaseModel):
    # Positive adds stock, negative removes it
    change: int


class DepartmentCreate(BaseModel):
    name: str
    description: str = ""
    location: str = ""
    phone: str = ""


class DoctorAssignment(BaseModel):
    doctor_id: str


# Response schemas
class AccountResponse(BaseModel):
    username: str
    role: Role
    is_active: bool
    created_date: str

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            username=account.username,
            role=account.role,
            is_active=account.is_active,
            created_date=account.created_date,
        )


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account: AccountResponse


class SlotsResponse(BaseModel):
    doctor_id: str
    date: str
    available: List[str]


class MessageResponse(BaseModel):
    message: str
