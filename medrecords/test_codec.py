"""Line codec tests"""
import pytest

from medrecords import codec
from medrecords.codec import ParseError
from medrecords.models import (
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
    Role,
)


def test_round_trip_every_kind():
    entities = [
        Account(username="alice", password_hash="$2b$04$abc", role=Role.PATIENT,
                is_active=False, created_date="2026-01-02"),
        Patient(patient_id="P001", username="alice", name="Alice", phone="0901234567",
                gender=Gender.FEMALE, date_of_birth="1990-05-01", address="", medical_history=""),
        Doctor(doctor_id="D001", username="drhouse", name="House", specialization="Diagnostics",
               schedule="Mon-Fri", consultation_fee=150000.5),
        Appointment(appointment_id="APT001", patient_username="alice", doctor_id="D001",
                    date="2026-03-11", time="09:30", price=0, status=AppointmentStatus.NO_SHOW),
        Medicine(medicine_id="MED001", name="Paracetamol", manufacturer="Acme", unit_price=0,
                 quantity_in_stock=0, reorder_level=0, expiry_date=""),
        Prescription(prescription_id="PRE001", appointment_id="", patient_username="alice",
                     doctor_id="D001", prescription_date="2026-03-10", is_dispensed=True,
                     items=[PrescriptionItem(medicine_id="MED001", medicine_name="Paracetamol",
                                             quantity=2, dosage="500mg", duration="3 days",
                                             instructions="after meals")]),
        Department(department_id="DEP001", name="Cardiology", doctor_ids=["D001", "D002"],
                   phone="0281234567"),
    ]
    for entity in entities:
        line = codec.encode(entity)
        assert codec.decode(entity.__class__.__name__, line) == entity
        assert codec.encode(codec.decode(entity.__class__.__name__, line)) == line


def test_account_line_format():
    account = Account(username="alice", password_hash="h", role=Role.ADMIN,
                      is_active=True, created_date="2026-01-02")
    assert codec.encode_account(account) == "alice|h|admin|1|2026-01-02"


def test_prescription_items_format():
    prescription = Prescription(
        prescription_id="PRE002", appointment_id="APT001", patient_username="alice", doctor_id="D001",
        items=[
            PrescriptionItem(medicine_id="MED001", medicine_name="A", quantity=1),
            PrescriptionItem(medicine_id="MED002", medicine_name="B", quantity=3, dosage="1/day"),
        ],
    )
    line = codec.encode_prescription(prescription)
    assert line.endswith("|0|MED001:A:1:::;MED002:B:3:1/day::")


def test_money_keeps_integral_and_fractional_values():
    assert codec.format_number(5000.0) == "5000"
    assert codec.format_number(12.25) == "12.25"


def test_decode_trims_fields():
    patient = codec.decode_patient(" P001 | alice |  Alice  |||| |")
    assert patient.patient_id == "P001"
    assert patient.name == "Alice"
    assert patient.gender == Gender.UNKNOWN


def test_skips_blank_and_comment_lines():
    assert codec.decode("Patient", "") is None
    assert codec.decode("Patient", "   ") is None
    assert codec.decode("Patient", codec.header("Patient")) is None


@pytest.mark.parametrize("line", [
    "P001|alice|Alice",                              # too few fields
    "|alice|Alice|0901234567|Male|1990-01-01||",       # empty id
    "P001|alice|Alice|0901234567|Male|1990-13-45||",   # bad date
    "P001|alice|Alice|0901234567|Male|90-01-01||",     # date syntax
])
def test_patient_rejections(line):
    with pytest.raises(ParseError):
        codec.decode_patient(line)


def test_numeric_fields_must_parse():
    with pytest.raises(ParseError):
        codec.decode_doctor("D001|drx|X||Male||GP||abc")
    with pytest.raises(ParseError):
        codec.decode_medicine("MED001|Aspirin|||Acme||1.5|ten|10|||")
    with pytest.raises(ParseError):
        codec.decode_medicine("MED001|Aspirin|||Acme||1.5|-1|10|||")


def test_undecodable_text_rejected():
    with pytest.raises(ParseError, match="UTF-8"):
        codec.decode("Medicine", "MED001|Asp\ufffdirin|||Acme||1.5|10|10|||")


def test_unknown_role_rejected():
    with pytest.raises(ParseError):
        codec.decode_account("alice|hash|nurse|1|2026-01-01")
    with pytest.raises(ParseError):
        codec.decode_account("alice|hash|unknown|1|2026-01-01")


def test_flag_must_be_zero_or_one():
    with pytest.raises(ParseError):
        codec.decode_account("alice|hash|patient|yes|2026-01-01")


def test_unknown_gender_and_status_default():
    doctor = codec.decode_doctor("D001|drx|X||Robot||GP||100")
    assert doctor.gender == Gender.UNKNOWN

    appointment = codec.decode_appointment("APT001|alice|D001|2026-03-11|09:00||100|0|postponed|")
    assert appointment.status == AppointmentStatus.UNKNOWN


def test_status_is_case_insensitive():
    appointment = codec.decode_appointment("APT001|alice|D001|2026-03-11|09:00||100|1|Completed|")
    assert appointment.status == AppointmentStatus.COMPLETED
    assert appointment.is_paid


def test_malformed_item_is_dropped():
    prescription = codec.decode_prescription("PRE001|APT001|alice|D001|2026-03-10|||0|MED001:A:2:::;MED002:B:zero:::")
    assert [item.medicine_id for item in prescription.items] == ["MED001"]


def test_department_phone_validated():
    with pytest.raises(ParseError):
        codec.decode_department("DEP001|Cardiology||||Floor 2|12345")
    department = codec.decode_department("DEP001|Cardiology||D001|D001, D002,D001|Floor 2|")
    assert department.doctor_ids == ["D001", "D002"]


def test_models_reject_delimiters():
    with pytest.raises(ValueError):
        Patient(patient_id="P001", username="alice", name="Al|ice")
    with pytest.raises(ValueError):
        PrescriptionItem(medicine_id="MED001", quantity=1, dosage="1;2")
