"""Prescription dispensing tests"""
import threading

import pytest

from medrecords import codec
from medrecords.conftest import TODAY, TOMORROW, make_medicine
from medrecords.models import Appointment, Prescription, PrescriptionItem
from medrecords.services.dispensing import DispensingService


@pytest.fixture
def dispensing(seeded_store):
    seeded_store.appointments.add(Appointment(appointment_id="APT001", patient_username="alice",
                                              doctor_id="D001", date=TOMORROW, time="09:00"))
    seeded_store.appointments.add(Appointment(appointment_id="APT002", patient_username="bob",
                                              doctor_id="D002", date=TOMORROW, time="09:00"))
    return DispensingService(seeded_store)


def prescription_with(store, *items, prescription_id="PRE001", **fields):
    prescription = Prescription(
        prescription_id=prescription_id, patient_username="alice", doctor_id="D001",
        items=[PrescriptionItem(medicine_id=medicine_id, quantity=quantity) for medicine_id, quantity in items],
        **fields,
    )
    assert store.prescriptions.add(prescription)
    return prescription


def test_insufficient_stock_aborts_without_mutation(dispensing, seeded_store):
    seeded_store.medicines.add(make_medicine("M1", "Alpha", stock=3, price=5000))
    seeded_store.medicines.add(make_medicine("M2", "Beta", stock=10, price=2000))
    prescription_with(seeded_store, ("M1", 5), ("M2", 2))

    result = dispensing.dispense_prescription("PRE001")

    assert not result.success
    assert result.message == "Insufficient stock"
    assert result.failed_items == ["M1"]
    assert seeded_store.medicines.get_by_id("M1").quantity_in_stock == 3
    assert seeded_store.medicines.get_by_id("M2").quantity_in_stock == 10
    assert not seeded_store.prescriptions.get_by_id("PRE001").is_dispensed


def test_successful_dispense_deducts_and_totals(dispensing, seeded_store):
    seeded_store.medicines.add(make_medicine("M1", "Alpha", stock=10, price=5000))
    seeded_store.medicines.add(make_medicine("M2", "Beta", stock=10, price=2000))
    prescription_with(seeded_store, ("M1", 2), ("M2", 3))

    assert dispensing.can_dispense("PRE001")
    assert dispensing.calculate_prescription_cost("PRE001") == 16000

    result = dispensing.dispense_prescription("PRE001")

    assert result.success
    assert result.message == "Prescription dispensed successfully"
    assert result.total_cost == 16000
    assert result.failed_items == []
    assert seeded_store.medicines.get_by_id("M1").quantity_in_stock == 8
    assert seeded_store.medicines.get_by_id("M2").quantity_in_stock == 7
    assert seeded_store.prescriptions.get_by_id("PRE001").is_dispensed

    again = dispensing.dispense_prescription("PRE001")
    assert not again.success
    assert again.message == "Prescription already dispensed"
    assert seeded_store.medicines.get_by_id("M1").quantity_in_stock == 8


def test_missing_medicine_counts_as_failed(dispensing, seeded_store):
    seeded_store.medicines.add(make_medicine("M1", "Alpha", stock=10, price=1))
    prescription_with(seeded_store, ("M1", 1), ("GONE", 1))
    result = dispensing.dispense_prescription("PRE001")
    assert result.failed_items == ["GONE"]
    assert dispensing.get_insufficient_stock_items("PRE001") == ["GONE"]
    assert dispensing.calculate_prescription_cost("PRE001") == 1


def test_not_found_and_empty(dispensing, seeded_store):
    assert dispensing.dispense_prescription("PRE404").message == "Prescription not found"
    assert dispensing.calculate_prescription_cost("PRE404") is None
    prescription_with(seeded_store)
    result = dispensing.dispense_prescription("PRE001")
    assert not result.success
    assert result.message == "Prescription has no items"
    assert not dispensing.can_dispense("PRE001")


def test_undispense_keeps_stock(dispensing, seeded_store):
    seeded_store.medicines.add(make_medicine("M1", "Alpha", stock=10, price=1))
    prescription_with(seeded_store, ("M1", 4))
    assert dispensing.dispense_prescription("PRE001").success
    assert dispensing.mark_as_undispensed("PRE001")
    assert not seeded_store.prescriptions.get_by_id("PRE001").is_dispensed
    assert seeded_store.medicines.get_by_id("M1").quantity_in_stock == 6


def test_create_prescription_from_appointment(dispensing, seeded_store):
    prescription = dispensing.create_prescription("APT002", diagnosis="Flu", notes="Rest")
    assert prescription.prescription_id == "PRE001"
    assert prescription.patient_username == "bob"
    assert prescription.doctor_id == "D002"
    assert prescription.prescription_date == TODAY
    assert dispensing.create_prescription("APT002") is None
    assert dispensing.create_prescription("APT404") is None


def test_item_management(dispensing, seeded_store):
    seeded_store.medicines.add(make_medicine("M1", "Alpha", stock=10, price=1))
    seeded_store.medicines.add(make_medicine("M2", "Beta", stock=10, price=1))
    prescription = dispensing.create_prescription("APT001")
    pid = prescription.prescription_id

    assert dispensing.add_prescription_item(pid, "M1", 2, dosage="1 tab")
    assert dispensing.add_prescription_item(pid, "M1", 5)
    assert not dispensing.add_prescription_item(pid, "M9", 1)
    assert not dispensing.add_prescription_item(pid, "M2", 0)
    items = seeded_store.prescriptions.get_by_id(pid).items
    assert [(i.medicine_id, i.medicine_name, i.quantity) for i in items] == [("M1", "Alpha", 5)]

    assert not dispensing.update_prescription_item(pid, "M2", 1)
    assert dispensing.update_prescription_item(pid, "M1", 3)
    assert dispensing.add_prescription_item(pid, "M2", 1)
    assert dispensing.remove_prescription_item(pid, "M2")
    assert not dispensing.remove_prescription_item(pid, "M2")
    assert seeded_store.prescriptions.get_by_id(pid).items[0].quantity == 3

    assert dispensing.dispense_prescription(pid).success
    assert not dispensing.add_prescription_item(pid, "M2", 1)
    assert not dispensing.remove_prescription_item(pid, "M1")
    assert not dispensing.clear_prescription_items(pid)
    assert not dispensing.delete_prescription(pid)


def test_clear_and_delete(dispensing, seeded_store):
    seeded_store.medicines.add(make_medicine("M1", "Alpha", stock=10, price=1))
    prescription_with(seeded_store, ("M1", 1))
    assert dispensing.clear_prescription_items("PRE001")
    assert seeded_store.prescriptions.get_by_id("PRE001").items == []
    assert dispensing.delete_prescription("PRE001")
    assert not seeded_store.prescriptions.exists("PRE001")


def test_duplicate_medicine_items_collapse_to_last():
    prescription = Prescription(
        prescription_id="PRE001", patient_username="alice", doctor_id="D001",
        items=[PrescriptionItem(medicine_id="M1", quantity=5),
               PrescriptionItem(medicine_id="M2", quantity=1),
               PrescriptionItem(medicine_id="M1", quantity=3)],
    )
    assert [(i.medicine_id, i.quantity) for i in prescription.items] == [("M1", 3), ("M2", 1)]

    loaded = codec.decode("Prescription", "PRE002||alice|D001||||0|M1:Alpha:5:::;M1:Alpha:5:::")
    assert [(i.medicine_id, i.quantity) for i in loaded.items] == [("M1", 5)]


def test_duplicate_line_items_dispense_once(dispensing, seeded_store):
    seeded_store.medicines.add(make_medicine("M1", "Alpha", stock=8, price=1))
    path = seeded_store.path_for("Prescription")
    with open(path, "a", encoding="utf-8") as f:
        f.write("PRE001||alice|D001||||0|M1:Alpha:5:::;M1:Alpha:5:::\n")
    assert seeded_store.prescriptions.load()

    result = dispensing.dispense_prescription("PRE001")
    assert result.success
    assert seeded_store.medicines.get_by_id("M1").quantity_in_stock == 3


def test_stock_check_sums_demand_per_medicine(dispensing, seeded_store):
    seeded_store.medicines.add(make_medicine("M1", "Alpha", stock=8, price=1))
    # Built without validation, as a caller handing over raw items could
    prescription = Prescription.model_construct(
        prescription_id="PRE009", patient_username="alice", doctor_id="D001",
        items=[PrescriptionItem(medicine_id="M1", quantity=5), PrescriptionItem(medicine_id="M1", quantity=5)],
    )
    assert dispensing._short_items(prescription) == ["M1"]


def test_concurrent_dispensing_never_overdraws(dispensing, seeded_store):
    seeded_store.medicines.add(make_medicine("M1", "Alpha", stock=5, price=1))
    prescription_with(seeded_store, ("M1", 4), prescription_id="PRE001")
    prescription_with(seeded_store, ("M1", 4), prescription_id="PRE002")
    results = []

    def dispense(prescription_id):
        results.append(dispensing.dispense_prescription(prescription_id).success)

    threads = [threading.Thread(target=dispense, args=(f"PRE00{1 + i % 2}",)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 8
    assert results.count(True) == 1
    assert seeded_store.medicines.get_by_id("M1").quantity_in_stock == 1
    assert len(seeded_store.prescriptions.get_dispensed()) == 1
