import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import datetime

import pytest

from medrecords.database import DataStore
from medrecords.models import Doctor, Gender, Medicine, Patient
from medrecords.passwords import BcryptHasher
from medrecords.validators.time_validator import FixedClock

TODAY = "2026-03-10"
TOMORROW = "2026-03-11"
YESTERDAY = "2026-03-09"


@pytest.fixture
def clock():
    # 10:15 on a Tuesday
    return FixedClock(datetime(2026, 3, 10, 10, 15))


@pytest.fixture
def store(tmp_path, clock):
    return DataStore(tmp_path / "data", clock)


@pytest.fixture
def hasher():
    return BcryptHasher(rounds=4)


@pytest.fixture
def seeded_store(store):
    store.patients.add(Patient(patient_id="P001", username="alice", name="Alice Tran",
                               phone="0901234567", gender=Gender.FEMALE, date_of_birth="1990-05-01"))
    store.patients.add(Patient(patient_id="P002", username="bob", name="Bob Le"))
    store.doctors.add(Doctor(doctor_id="D001", username="drhouse", name="Gregory House",
                             specialization="Diagnostics", consultation_fee=500000))
    store.doctors.add(Doctor(doctor_id="D002", username="drgrey", name="Meredith Grey",
                             specialization="Surgery", consultation_fee=300000))
    return store


def make_medicine(medicine_id, name, stock, price, manufacturer="Acme", **fields):
    return Medicine(medicine_id=medicine_id, name=name, manufacturer=manufacturer,
                    quantity_in_stock=stock, unit_price=price, **fields)
