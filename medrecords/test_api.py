"""HTTP surface tests"""
import pytest
from fastapi.testclient import TestClient

from medrecords.conftest import TOMORROW, make_medicine
from medrecords.database import reset_store, set_store
from medrecords.main import create_app
from medrecords.seed_admin import ensure_admin_account


@pytest.fixture
def client(store):
    set_store(store)
    ensure_admin_account(store, "admin", "adminpass", rounds=4)
    with TestClient(create_app()) as test_client:
        yield test_client
    reset_store()


def login(client, username, password):
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def register(client, **data):
    response = client.post("/api/auth/register", json=data)
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def people(client):
    patient = register(client, username="alice", password="secret1", role="patient", name="Alice")
    doctor = register(client, username="drhouse", password="secret1", role="doctor",
                      name="House", specialization="Diagnostics", consultation_fee=500)
    admin = login(client, "admin", "adminpass")
    return {"patient": patient, "doctor": doctor, "admin": admin}


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_register_login_and_me(client):
    headers = register(client, username="alice", password="secret1", role="patient")
    me = client.get("/api/auth/me", headers=headers).json()
    assert me == {"username": "alice", "role": "patient", "is_active": True, "created_date": me["created_date"]}
    assert "password_hash" not in me

    assert client.post("/api/auth/login", json={"username": "alice", "password": "nope"}).status_code == 401
    assert client.post("/api/auth/register", json={"username": "alice", "password": "secret1"}).status_code == 400
    assert client.post("/api/auth/register",
                       json={"username": "eve", "password": "secret1", "role": "admin"}).status_code == 403


def test_requires_token(client):
    assert client.get("/api/doctors").status_code in (401, 403)
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get("/api/doctors", headers=bad).status_code == 401


def test_booking_flow(client, people):
    slots = client.get("/api/appointments/slots", params={"doctor_id": "D001", "date": TOMORROW},
                       headers=people["patient"]).json()
    assert "09:00" in slots["available"]

    response = client.post("/api/appointments", json={"doctor_id": "D001", "date": TOMORROW, "time": "09:00"},
                           headers=people["patient"])
    assert response.status_code == 201, response.text
    appointment = response.json()
    assert appointment["price"] == 500
    assert appointment["status"] == "scheduled"

    again = client.post("/api/appointments", json={"doctor_id": "D001", "date": TOMORROW, "time": "09:00"},
                        headers=people["patient"])
    assert again.status_code == 400
    assert "already booked" in again.json()["detail"]

    mine = client.get("/api/appointments/mine", headers=people["doctor"]).json()
    assert [a["appointment_id"] for a in mine] == [appointment["appointment_id"]]

    cancelled = client.post(f"/api/appointments/{appointment['appointment_id']}/cancel", headers=people["patient"])
    assert cancelled.json()["status"] == "cancelled"


def test_patient_cannot_see_others(client, people):
    client.post("/api/appointments", json={"doctor_id": "D001", "date": TOMORROW, "time": "09:00"},
                headers=people["patient"])
    other = register(client, username="bob", password="secret1", role="patient")
    assert client.get("/api/appointments/APT001", headers=other).status_code == 403
    assert client.get("/api/appointments/APT001", headers=people["patient"]).status_code == 200
    assert client.get("/api/appointments/APT404", headers=people["patient"]).status_code == 404


def test_prescription_and_dispense_flow(client, people, store):
    store.medicines.add(make_medicine("MED001", "Alpha", stock=10, price=5000))
    store.medicines.add(make_medicine("MED002", "Beta", stock=10, price=2000))
    client.post("/api/appointments", json={"doctor_id": "D001", "date": TOMORROW, "time": "09:00"},
                headers=people["patient"])

    created = client.post("/api/prescriptions", json={"appointment_id": "APT001", "diagnosis": "Flu"},
                          headers=people["doctor"])
    assert created.status_code == 201, created.text
    pid = created.json()["prescription_id"]

    for medicine_id, quantity in (("MED001", 2), ("MED002", 3)):
        response = client.post(f"/api/prescriptions/{pid}/items",
                               json={"medicine_id": medicine_id, "quantity": quantity},
                               headers=people["doctor"])
        assert response.status_code == 200, response.text

    check = client.get(f"/api/prescriptions/{pid}/dispense-check", headers=people["admin"]).json()
    assert check["success"] and check["total_cost"] == 16000

    assert client.post(f"/api/prescriptions/{pid}/dispense", headers=people["doctor"]).status_code == 403
    result = client.post(f"/api/prescriptions/{pid}/dispense", headers=people["admin"]).json()
    assert result == {"success": True, "message": "Prescription dispensed successfully",
                      "total_cost": 16000, "failed_items": []}
    assert store.medicines.get_by_id("MED001").quantity_in_stock == 8

    mine = client.get("/api/prescriptions", headers=people["patient"]).json()
    assert mine[0]["is_dispensed"] is True


def test_pharmacy_admin_only(client, people):
    medicine = {"name": "Aspirin", "manufacturer": "Acme", "unit_price": 10, "quantity": 2}
    assert client.post("/api/pharmacy/medicines", json=medicine, headers=people["patient"]).status_code == 403

    created = client.post("/api/pharmacy/medicines", json=medicine, headers=people["admin"])
    assert created.status_code == 201
    assert client.post("/api/pharmacy/medicines", json=medicine, headers=people["admin"]).status_code == 400

    mid = created.json()["medicine_id"]
    low = client.get("/api/pharmacy/medicines/low-stock", headers=people["admin"]).json()
    assert [m["medicine_id"] for m in low] == [mid]

    assert client.post(f"/api/pharmacy/medicines/{mid}/stock", json={"change": -5},
                       headers=people["admin"]).status_code == 400
    stocked = client.post(f"/api/pharmacy/medicines/{mid}/stock", json={"change": 20}, headers=people["admin"])
    assert stocked.json()["quantity_in_stock"] == 22


def test_departments(client, people):
    created = client.post("/api/departments", json={"name": "Cardiology"}, headers=people["admin"])
    assert created.status_code == 201
    did = created.json()["department_id"]
    head = client.put(f"/api/departments/{did}/head", json={"doctor_id": "D001"}, headers=people["admin"])
    assert head.json()["head_doctor_id"] == "D001"
    assert head.json()["doctor_ids"] == ["D001"]
    listed = client.get("/api/departments", headers=people["patient"]).json()
    assert [d["name"] for d in listed] == ["Cardiology"]
