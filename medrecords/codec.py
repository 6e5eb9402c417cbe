"""
Line codec for the flat-file store.

Every entity kind maps to exactly one pipe-delimited line. Encoding is total for any
valid in-memory entity; decoding trims fields, validates them and raises ParseError
for anything malformed so that the loader can drop the line and carry on.
"""

import logging
from typing import Callable, Dict, List, Optional, Type

from pydantic import ValidationError

from medrecords.models import (
    FIELD_DELIMITER,
    ITEM_DELIMITER,
    ITEM_FIELD_DELIMITER,
    LIST_DELIMITER,
    Account,
    Appointment,
    AppointmentStatus,
    Department,
    Doctor,
    Gender,
    Medicine,
    Patient,
    Prescription,
    PrescriptionItem,
    Record,
    Role,
)
from medrecords.validators.password_validator import is_valid_phone

logger = logging.getLogger(__name__)

COMMENT_CHAR = "#"

FIELD_NAMES: Dict[str, List[str]] = {
    "Account": ["username", "passwordHash", "role", "isActive", "createdDate"],
    "Patient": ["patientID", "username", "name", "phone", "gender", "dateOfBirth",
                "address", "medicalHistory"],
    "Doctor": ["doctorID", "username", "name", "phone", "gender", "dateOfBirth",
               "specialization", "schedule", "consultationFee"],
    "Appointment": ["appointmentID", "patientUsername", "doctorID", "date", "time",
                    "disease", "price", "isPaid", "status", "notes"],
    "Medicine": ["medicineID", "name", "genericName", "category", "manufacturer",
                 "description", "unitPrice", "quantity", "reorderLevel", "expiryDate",
                 "dosageForm", "strength"],
    "Prescription": ["prescriptionID", "appointmentID", "patientUsername", "doctorID",
                     "date", "diagnosis", "notes", "isDispensed", "items"],
    "Department": ["departmentID", "name", "description", "headDoctorID", "doctorIDs",
                   "location", "phone"],
}

ITEM_FIELD_NAMES = ["medicineID", "medicineName", "quantity", "dosage", "duration",
                    "instructions"]


REPLACEMENT_CHAR = "\ufffd"


class ParseError(ValueError):
    """A data line could not be turned into an entity"""

    def __init__(self, kind: str, message: str, line: str = ""):
        super().__init__(f"{kind}: {message}")
        self.kind = kind
        self.line = line


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def is_skippable(line: str) -> bool:
    """Blank lines and '#' comment lines carry no record"""
    return not line.strip() or line.startswith(COMMENT_CHAR)


def header(kind: str) -> str:
    names = FIELD_NAMES.get(kind)
    if not names:
        return "# Data file"
    line = "# " + FIELD_DELIMITER.join(names)
    if kind == "Prescription":
        line += "\n# items: " + ITEM_FIELD_DELIMITER.join(ITEM_FIELD_NAMES) + " joined by '" + ITEM_DELIMITER + "'"
    return line


def format_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_flag(value: bool) -> str:
    return "1" if value else "0"


def split_fields(kind: str, line: str) -> List[str]:
    parts = line.split(FIELD_DELIMITER)
    expected = len(FIELD_NAMES[kind])
    if len(parts) != expected:
        raise ParseError(kind, f"expected {expected} fields, got {len(parts)}", line)
    return [part.strip() for part in parts]


def require(kind: str, line: str, **fields: str) -> None:
    for name, value in fields.items():
        if not value:
            raise ParseError(kind, f"required field '{name}' is empty", line)


def parse_float(kind: str, name: str, value: str, line: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise ParseError(kind, f"field '{name}' is not a number: '{value}'", line)


def parse_int(kind: str, name: str, value: str, line: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ParseError(kind, f"field '{name}' is not an integer: '{value}'", line)


def parse_flag(kind: str, name: str, value: str, line: str) -> bool:
    if value not in ("0", "1"):
        raise ParseError(kind, f"field '{name}' must be 0 or 1, got '{value}'", line)
    return value == "1"


def parse_gender(value: str) -> Gender:
    for gender in Gender:
        if gender.value.lower() == value.lower():
            return gender
    if value:
        logger.warning(f"Unrecognized gender '{value}', defaulting to {Gender.UNKNOWN.value}")
    return Gender.UNKNOWN


def parse_status(value: str) -> AppointmentStatus:
    try:
        return AppointmentStatus(value.lower())
    except ValueError:
        logger.warning(f"Unrecognized appointment status '{value}', defaulting to {AppointmentStatus.UNKNOWN.value}")
        return AppointmentStatus.UNKNOWN


def build(kind: str, model: Type[Record], line: str, **values) -> Record:
    try:
        return model(**values)
    except ValidationError as e:
        errors = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
        raise ParseError(kind, errors, line)


# ---------------------------------------------------------------------------
# Encoders
# ---------------------------------------------------------------------------

def encode_account(account: Account) -> str:
    return FIELD_DELIMITER.join([
        account.username,
        account.password_hash,
        account.role.value,
        format_flag(account.is_active),
        account.created_date,
    ])


def encode_patient(patient: Patient) -> str:
    return FIELD_DELIMITER.join([
        patient.patient_id,
        patient.username,
        patient.name,
        patient.phone,
        patient.gender.value,
        patient.date_of_birth,
        patient.address,
        patient.medical_history,
    ])


def encode_doctor(doctor: Doctor) -> str:
    return FIELD_DELIMITER.join([
        doctor.doctor_id,
        doctor.username,
        doctor.name,
        doctor.phone,
        doctor.gender.value,
        doctor.date_of_birth,
        doctor.specialization,
        doctor.schedule,
        format_number(doctor.consultation_fee),
    ])


def encode_appointment(appointment: Appointment) -> str:
    return FIELD_DELIMITER.join([
        appointment.appointment_id,
        appointment.patient_username,
        appointment.doctor_id,
        appointment.date,
        appointment.time,
        appointment.disease,
        format_number(appointment.price),
        format_flag(appointment.is_paid),
        appointment.status.value,
        appointment.notes,
    ])


def encode_medicine(medicine: Medicine) -> str:
    return FIELD_DELIMITER.join([
        medicine.medicine_id,
        medicine.name,
        medicine.generic_name,
        medicine.category,
        medicine.manufacturer,
        medicine.description,
        format_number(medicine.unit_price),
        str(medicine.quantity_in_stock),
        str(medicine.reorder_level),
        medicine.expiry_date,
        medicine.dosage_form,
        medicine.strength,
    ])


def encode_item(item: PrescriptionItem) -> str:
    return ITEM_FIELD_DELIMITER.join([
        item.medicine_id,
        item.medicine_name,
        str(item.quantity),
        item.dosage,
        item.duration,
        item.instructions,
    ])


def encode_prescription(prescription: Prescription) -> str:
    return FIELD_DELIMITER.join([
        prescription.prescription_id,
        prescription.appointment_id,
        prescription.patient_username,
        prescription.doctor_id,
        prescription.prescription_date,
        prescription.diagnosis,
        prescription.notes,
        format_flag(prescription.is_dispensed),
        ITEM_DELIMITER.join(encode_item(item) for item in prescription.items),
    ])


def encode_department(department: Department) -> str:
    return FIELD_DELIMITER.join([
        department.department_id,
        department.name,
        department.description,
        department.head_doctor_id,
        LIST_DELIMITER.join(department.doctor_ids),
        department.location,
        department.phone,
    ])


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------

def decode_account(line: str) -> Account:
    kind = "Account"
    username, password_hash, role, active, created = split_fields(kind, line)
    require(kind, line, username=username, passwordHash=password_hash)
    try:
        parsed_role = Role(role.lower())
    except ValueError:
        parsed_role = Role.UNKNOWN
    if parsed_role == Role.UNKNOWN:
        raise ParseError(kind, f"invalid role '{role}' for account {username}", line)
    return build(kind, Account, line,
                 username=username,
                 password_hash=password_hash,
                 role=parsed_role,
                 is_active=parse_flag(kind, "isActive", active, line),
                 created_date=created)


def decode_patient(line: str) -> Patient:
    kind = "Patient"
    fields = split_fields(kind, line)
    patient_id, username, name, phone, gender, dob, address, history = fields
    require(kind, line, patientID=patient_id, username=username)
    return build(kind, Patient, line,
                 patient_id=patient_id,
                 username=username,
                 name=name,
                 phone=phone,
                 gender=parse_gender(gender),
                 date_of_birth=dob,
                 address=address,
                 medical_history=history)


def decode_doctor(line: str) -> Doctor:
    kind = "Doctor"
    fields = split_fields(kind, line)
    doctor_id, username, name, phone, gender, dob, specialization, schedule, fee = fields
    require(kind, line, doctorID=doctor_id, username=username, consultationFee=fee)
    return build(kind, Doctor, line,
                 doctor_id=doctor_id,
                 username=username,
                 name=name,
                 phone=phone,
                 gender=parse_gender(gender),
                 date_of_birth=dob,
                 specialization=specialization,
                 schedule=schedule,
                 consultation_fee=parse_float(kind, "consultationFee", fee, line))


def decode_appointment(line: str) -> Appointment:
    kind = "Appointment"
    fields = split_fields(kind, line)
    appointment_id, patient, doctor_id, date, time, disease, price, paid, status, notes = fields
    require(kind, line, appointmentID=appointment_id, patientUsername=patient,
            doctorID=doctor_id, date=date, time=time, price=price)
    return build(kind, Appointment, line,
                 appointment_id=appointment_id,
                 patient_username=patient,
                 doctor_id=doctor_id,
                 date=date,
                 time=time,
                 disease=disease,
                 price=parse_float(kind, "price", price, line),
                 is_paid=parse_flag(kind, "isPaid", paid, line),
                 status=parse_status(status),
                 notes=notes)


def decode_medicine(line: str) -> Medicine:
    kind = "Medicine"
    fields = split_fields(kind, line)
    (medicine_id, name, generic_name, category, manufacturer, description,
     unit_price, quantity, reorder_level, expiry_date, dosage_form, strength) = fields
    require(kind, line, medicineID=medicine_id, name=name, unitPrice=unit_price,
            quantity=quantity, reorderLevel=reorder_level)
    return build(kind, Medicine, line,
                 medicine_id=medicine_id,
                 name=name,
                 generic_name=generic_name,
                 category=category,
                 manufacturer=manufacturer,
                 description=description,
                 unit_price=parse_float(kind, "unitPrice", unit_price, line),
                 quantity_in_stock=parse_int(kind, "quantity", quantity, line),
                 reorder_level=parse_int(kind, "reorderLevel", reorder_level, line),
                 expiry_date=expiry_date,
                 dosage_form=dosage_form,
                 strength=strength)


def decode_item(text: str) -> PrescriptionItem:
    kind = "PrescriptionItem"
    parts = [part.strip() for part in text.split(ITEM_FIELD_DELIMITER)]
    if len(parts) != len(ITEM_FIELD_NAMES):
        raise ParseError(kind, f"expected {len(ITEM_FIELD_NAMES)} item fields, got {len(parts)}", text)
    medicine_id, medicine_name, quantity, dosage, duration, instructions = parts
    require(kind, text, medicineID=medicine_id, quantity=quantity)
    return build(kind, PrescriptionItem, text,
                 medicine_id=medicine_id,
                 medicine_name=medicine_name,
                 quantity=parse_int(kind, "quantity", quantity, text),
                 dosage=dosage,
                 duration=duration,
                 instructions=instructions)


def decode_items(text: str, prescription_id: str = "") -> List[PrescriptionItem]:
    items: List[PrescriptionItem] = []
    if not text:
        return items
    for chunk in text.split(ITEM_DELIMITER):
        if not chunk.strip():
            continue
        try:
            items.append(decode_item(chunk))
        except ParseError as e:
            logger.warning(f"Dropping malformed item in prescription {prescription_id}: {e}")
    return items


def decode_prescription(line: str) -> Prescription:
    kind = "Prescription"
    fields = split_fields(kind, line)
    (prescription_id, appointment_id, patient, doctor_id, date, diagnosis, notes,
     dispensed, items) = fields
    require(kind, line, prescriptionID=prescription_id, patientUsername=patient, doctorID=doctor_id)
    return build(kind, Prescription, line,
                 prescription_id=prescription_id,
                 appointment_id=appointment_id,
                 patient_username=patient,
                 doctor_id=doctor_id,
                 prescription_date=date,
                 diagnosis=diagnosis,
                 notes=notes,
                 is_dispensed=parse_flag(kind, "isDispensed", dispensed, line),
                 items=decode_items(items, prescription_id))


def decode_department(line: str) -> Department:
    kind = "Department"
    fields = split_fields(kind, line)
    department_id, name, description, head, doctor_ids, location, phone = fields
    require(kind, line, departmentID=department_id, name=name)
    if phone and not is_valid_phone(phone):
        raise ParseError(kind, f"invalid phone number '{phone}' for department {department_id}", line)
    members = [d.strip() for d in doctor_ids.split(LIST_DELIMITER)] if doctor_ids else []
    return build(kind, Department, line,
                 department_id=department_id,
                 name=name,
                 description=description,
                 head_doctor_id=head,
                 doctor_ids=[d for d in members if d],
                 location=location,
                 phone=phone)


class EntityCodec:
    """Encoder/decoder pair bound to one entity kind"""

    def __init__(self, kind: str, model: Type[Record],
                 encoder: Callable[[Record], str], decoder: Callable[[str], Record]):
        self.kind = kind
        self.model = model
        self._encoder = encoder
        self._decoder = decoder

    def header(self) -> str:
        return header(self.kind)

    def encode(self, entity: Record) -> str:
        return self._encoder(entity)

    def decode(self, line: str) -> Optional[Record]:
        """Decode one line; None for blank/comment lines, ParseError when malformed"""
        if is_skippable(line):
            return None
        if REPLACEMENT_CHAR in line:
            raise ParseError(self.kind, "line is not valid UTF-8", line)
        return self._decoder(line.rstrip("\r\n"))


ACCOUNT_CODEC = EntityCodec("Account", Account, encode_account, decode_account)
PATIENT_CODEC = EntityCodec("Patient", Patient, encode_patient, decode_patient)
DOCTOR_CODEC = EntityCodec("Doctor", Doctor, encode_doctor, decode_doctor)
APPOINTMENT_CODEC = EntityCodec("Appointment", Appointment, encode_appointment, decode_appointment)
MEDICINE_CODEC = EntityCodec("Medicine", Medicine, encode_medicine, decode_medicine)
PRESCRIPTION_CODEC = EntityCodec("Prescription", Prescription, encode_prescription, decode_prescription)
DEPARTMENT_CODEC = EntityCodec("Department", Department, encode_department, decode_department)

CODECS: Dict[str, EntityCodec] = {
    codec.kind: codec
    for codec in (ACCOUNT_CODEC, PATIENT_CODEC, DOCTOR_CODEC, APPOINTMENT_CODEC,
                  MEDICINE_CODEC, PRESCRIPTION_CODEC, DEPARTMENT_CODEC)
}


def encode(entity: Record) -> str:
    for codec in CODECS.values():
        if isinstance(entity, codec.model):
            return codec.encode(entity)
    raise TypeError(f"No codec for {type(entity).__name__}")


def decode(kind: str, line: str) -> Optional[Record]:
    return CODECS[kind].decode(line)
