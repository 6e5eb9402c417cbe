"""
Prescription management and dispensing

Dispensing is check-then-commit over every item of a prescription. The prescription
lock and then the medicine lock are held for the whole operation, so stock cannot
change between the check and the deduction.
"""

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from medrecords.database import DataStore
from medrecords.models import Prescription, PrescriptionItem
from medrecords.validators.time_validator import Clock

logger = logging.getLogger(__name__)

PRESCRIPTION_NOT_FOUND = "Prescription not found"
ALREADY_DISPENSED = "Prescription already dispensed"
NO_ITEMS = "Prescription has no items"
INSUFFICIENT_STOCK = "Insufficient stock"
DISPENSED = "Prescription dispensed successfully"
SAVE_FAILED = "Failed to save dispensing changes"


class DispenseResult(BaseModel):
    success: bool
    message: str
    total_cost: float = 0.0
    failed_items: List[str] = Field(default_factory=list)


class DispensingService:
    def __init__(self, store: DataStore, clock: Optional[Clock] = None):
        self.store = store
        self.clock = clock or store.clock

    # ------------------------------------------------------------------
    # Stock checks
    # ------------------------------------------------------------------

    def _short_items(self, prescription: Prescription) -> List[str]:
        """Medicine IDs that are missing or short on stock, in item order"""
        demand: Dict[str, int] = {}
        for item in prescription.items:
            demand[item.medicine_id] = demand.get(item.medicine_id, 0) + item.quantity
        failed = []
        for medicine_id, quantity in demand.items():
            medicine = self.store.medicines.get_by_id(medicine_id)
            if medicine is None or medicine.quantity_in_stock < quantity:
                failed.append(medicine_id)
        return failed

    def get_insufficient_stock_items(self, prescription_id: str) -> List[str]:
        prescription = self.store.prescriptions.get_by_id(prescription_id)
        if prescription is None:
            return []
        return self._short_items(prescription)

    def can_dispense(self, prescription_id: str) -> bool:
        prescription = self.store.prescriptions.get_by_id(prescription_id)
        if prescription is None or prescription.is_dispensed or not prescription.items:
            return False
        return not self._short_items(prescription)

    def calculate_prescription_cost(self, prescription_id: str) -> Optional[float]:
        """Sum of unit price x quantity; items whose medicine is gone count as zero"""
        prescription = self.store.prescriptions.get_by_id(prescription_id)
        if prescription is None:
            return None
        total = 0.0
        for item in prescription.items:
            medicine = self.store.medicines.get_by_id(item.medicine_id)
            if medicine is not None:
                total += medicine.unit_price * item.quantity
        return total

    # ------------------------------------------------------------------
    # Dispensing
    # ------------------------------------------------------------------

    def dispense_prescription(self, prescription_id: str) -> DispenseResult:
        prescriptions = self.store.prescriptions
        medicines = self.store.medicines

        with prescriptions.locked(), medicines.locked():
            prescription = prescriptions.get_by_id(prescription_id)
            if prescription is None:
                return DispenseResult(success=False, message=PRESCRIPTION_NOT_FOUND)
            if prescription.is_dispensed:
                return DispenseResult(success=False, message=ALREADY_DISPENSED)
            if not prescription.items:
                return DispenseResult(success=False, message=NO_ITEMS)

            failed = self._short_items(prescription)
            if failed:
                logger.info(f"Cannot dispense {prescription_id}, short on {', '.join(failed)}")
                return DispenseResult(success=False, message=INSUFFICIENT_STOCK, failed_items=failed)

            total_cost = 0.0
            saved = True
            for item in prescription.items:
                medicine = medicines.get_by_id(item.medicine_id)
                medicine.quantity_in_stock -= item.quantity
                saved = medicines.update(medicine) and saved
                total_cost += medicine.unit_price * item.quantity

            saved = prescriptions.mark_as_dispensed(prescription_id) and saved

        if not saved:
            logger.error(f"Dispensed {prescription_id} but a save failed; data file lags memory")
            return DispenseResult(success=False, message=SAVE_FAILED, total_cost=total_cost)

        logger.info(f"Dispensed {prescription_id}, total cost {total_cost:.2f}")
        return DispenseResult(success=True, message=DISPENSED, total_cost=total_cost)

    def mark_as_undispensed(self, prescription_id: str) -> bool:
        """Flip the flag back; stock already deducted is not restored"""
        if self.store.prescriptions.mark_as_undispensed(prescription_id):
            logger.info(f"Prescription {prescription_id} marked undispensed (stock not restored)")
            return True
        return False

    # ------------------------------------------------------------------
    # Prescriptions and items
    # ------------------------------------------------------------------

    def create_prescription(self, appointment_id: str, diagnosis: str = "",
                            notes: str = "") -> Optional[Prescription]:
        appointment = self.store.appointments.get_by_id(appointment_id)
        if appointment is None:
            logger.info(f"Cannot create prescription: appointment {appointment_id} not found")
            return None

        prescriptions = self.store.prescriptions
        with prescriptions.locked():
            if prescriptions.get_by_appointment(appointment_id) is not None:
                logger.info(f"Appointment {appointment_id} already has a prescription")
                return None
            try:
                prescription = Prescription(
                    prescription_id=prescriptions.get_next_id(),
                    appointment_id=appointment_id,
                    patient_username=appointment.patient_username,
                    doctor_id=appointment.doctor_id,
                    prescription_date=self.clock.today(),
                    diagnosis=diagnosis,
                    notes=notes,
                )
            except ValueError as e:
                logger.info(f"Rejected prescription for {appointment_id}: {e}")
                return None
            if not prescriptions.add(prescription):
                return None

        logger.info(f"Created prescription {prescription.prescription_id} for {appointment_id}")
        return prescription

    def delete_prescription(self, prescription_id: str) -> bool:
        prescriptions = self.store.prescriptions
        with prescriptions.locked():
            prescription = prescriptions.get_by_id(prescription_id)
            if prescription is None or prescription.is_dispensed:
                return False
            return prescriptions.remove(prescription_id)

    def _modify_items(self, prescription_id: str, change) -> bool:
        """Apply change(prescription) -> bool to an undispensed prescription and store it"""
        prescriptions = self.store.prescriptions
        with prescriptions.locked():
            prescription = prescriptions.get_by_id(prescription_id)
            if prescription is None:
                return False
            if prescription.is_dispensed:
                logger.info(f"Prescription {prescription_id} is dispensed, items are locked")
                return False
            if not change(prescription):
                return False
            return prescriptions.update(prescription)

    def _build_item(self, medicine_id: str, quantity: int, dosage: str, duration: str,
                    instructions: str) -> Optional[PrescriptionItem]:
        if quantity <= 0:
            return None
        medicine = self.store.medicines.get_by_id(medicine_id)
        if medicine is None:
            return None
        try:
            return PrescriptionItem(
                medicine_id=medicine_id,
                medicine_name=medicine.name,
                quantity=quantity,
                dosage=dosage,
                duration=duration,
                instructions=instructions,
            )
        except ValueError as e:
            logger.info(f"Rejected item for {medicine_id}: {e}")
            return None

    def add_prescription_item(self, prescription_id: str, medicine_id: str, quantity: int,
                              dosage: str = "", duration: str = "", instructions: str = "") -> bool:
        """Add an item; an item for the same medicine is replaced"""
        item = self._build_item(medicine_id, quantity, dosage, duration, instructions)
        if item is None:
            return False

        def change(prescription: Prescription) -> bool:
            prescription.add_item(item)
            return True

        return self._modify_items(prescription_id, change)

    def update_prescription_item(self, prescription_id: str, medicine_id: str, quantity: int,
                                 dosage: str = "", duration: str = "", instructions: str = "") -> bool:
        """Replace an existing item; fails when the medicine is not on the prescription"""
        item = self._build_item(medicine_id, quantity, dosage, duration, instructions)
        if item is None:
            return False

        def change(prescription: Prescription) -> bool:
            if not prescription.has_medicine(medicine_id):
                return False
            prescription.add_item(item)
            return True

        return self._modify_items(prescription_id, change)

    def remove_prescription_item(self, prescription_id: str, medicine_id: str) -> bool:
        return self._modify_items(prescription_id, lambda p: p.remove_item(medicine_id))

    def clear_prescription_items(self, prescription_id: str) -> bool:
        def change(prescription: Prescription) -> bool:
            prescription.clear_items()
            return True

        return self._modify_items(prescription_id, change)
