from typing import List, Optional

from medrecords.codec import PRESCRIPTION_CODEC
from medrecords.ids import PRESCRIPTION_PREFIX
from medrecords.models import Prescription
from medrecords.repositories.base import FileRepository, StoreError, synchronized


class PrescriptionRepository(FileRepository[Prescription]):
    codec = PRESCRIPTION_CODEC
    id_prefix = PRESCRIPTION_PREFIX

    def conflicts(self, candidate: Prescription, existing: Prescription) -> bool:
        # One prescription per appointment; prescriptions without one never clash
        return bool(candidate.appointment_id) and candidate.appointment_id == existing.appointment_id

    def get_by_appointment(self, appointment_id: str) -> Optional[Prescription]:
        if not appointment_id:
            return None
        return self.find_one(lambda p: p.appointment_id == appointment_id)

    def get_by_patient(self, username: str) -> List[Prescription]:
        return self.find(lambda p: p.patient_username == username)

    def get_by_doctor(self, doctor_id: str) -> List[Prescription]:
        return self.find(lambda p: p.doctor_id == doctor_id)

    def get_undispensed(self) -> List[Prescription]:
        return self.find(lambda p: not p.is_dispensed)

    def get_dispensed(self) -> List[Prescription]:
        return self.find(lambda p: p.is_dispensed)

    def get_by_date(self, date: str) -> List[Prescription]:
        return self.find(lambda p: p.prescription_date == date)

    def get_by_date_range(self, start_date: str, end_date: str) -> List[Prescription]:
        return self.find(lambda p: start_date <= p.prescription_date <= end_date)

    def get_by_medicine(self, medicine_id: str) -> List[Prescription]:
        return self.find(lambda p: p.has_medicine(medicine_id))

    def _set_dispensed(self, prescription_id: str, dispensed: bool) -> bool:
        index = self._index_of(prescription_id)
        if index < 0:
            self.last_error = StoreError.NOT_FOUND
            return False
        if self._items[index].is_dispensed == dispensed:
            return True
        self._items[index].is_dispensed = dispensed
        return self._save()

    @synchronized
    def mark_as_dispensed(self, prescription_id: str) -> bool:
        """Idempotent: an already-dispensed prescription is left untouched"""
        return self._set_dispensed(prescription_id, True)

    @synchronized
    def mark_as_undispensed(self, prescription_id: str) -> bool:
        return self._set_dispensed(prescription_id, False)
