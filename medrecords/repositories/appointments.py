from typing import List

from medrecords.codec import APPOINTMENT_CODEC
from medrecords.ids import APPOINTMENT_PREFIX
from medrecords.models import Appointment, AppointmentStatus
from medrecords.repositories.base import FileRepository, synchronized
from medrecords.validators.time_validator import Clock, system_clock


class AppointmentRepository(FileRepository[Appointment]):
    """
    Appointments, with the double-booking guard: at most one non-cancelled
    appointment per (doctor, date, time).
    """

    codec = APPOINTMENT_CODEC
    id_prefix = APPOINTMENT_PREFIX

    def __init__(self, file_path, file_store, clock: Clock = system_clock):
        super().__init__(file_path, file_store)
        self.clock = clock

    def conflicts(self, candidate: Appointment, existing: Appointment) -> bool:
        return candidate.occupies_slot and existing.occupies_slot and candidate.same_slot(existing)

    def get_by_patient(self, username: str) -> List[Appointment]:
        return self.find(lambda a: a.patient_username == username)

    def get_upcoming_by_patient(self, username: str) -> List[Appointment]:
        today = self.clock.today()
        return self.find(lambda a: a.patient_username == username
                         and a.status == AppointmentStatus.SCHEDULED and a.date >= today)

    def get_history_by_patient(self, username: str) -> List[Appointment]:
        today = self.clock.today()
        return self.find(lambda a: a.patient_username == username
                         and (a.date < today or a.status != AppointmentStatus.SCHEDULED))

    def get_unpaid_by_patient(self, username: str) -> List[Appointment]:
        return self.find(lambda a: a.patient_username == username and not a.is_paid
                         and a.status != AppointmentStatus.CANCELLED)

    def get_by_doctor(self, doctor_id: str) -> List[Appointment]:
        return self.find(lambda a: a.doctor_id == doctor_id)

    def get_upcoming_by_doctor(self, doctor_id: str) -> List[Appointment]:
        today = self.clock.today()
        return self.find(lambda a: a.doctor_id == doctor_id
                         and a.status == AppointmentStatus.SCHEDULED and a.date >= today)

    def get_by_date(self, date: str) -> List[Appointment]:
        return self.find(lambda a: a.date == date)

    def get_by_date_range(self, start_date: str, end_date: str) -> List[Appointment]:
        return self.find(lambda a: start_date <= a.date <= end_date)

    def get_today(self) -> List[Appointment]:
        return self.get_by_date(self.clock.today())

    def get_by_status(self, status: AppointmentStatus) -> List[Appointment]:
        return self.find(lambda a: a.status == status)

    def get_scheduled(self) -> List[Appointment]:
        return self.get_by_status(AppointmentStatus.SCHEDULED)

    def get_completed(self) -> List[Appointment]:
        return self.get_by_status(AppointmentStatus.COMPLETED)

    def get_cancelled(self) -> List[Appointment]:
        return self.get_by_status(AppointmentStatus.CANCELLED)

    @synchronized
    def get_booked_slots(self, doctor_id: str, date: str) -> List[str]:
        """Sorted times held by the doctor's non-cancelled appointments on a date"""
        return sorted(
            a.time for a in self._items
            if a.doctor_id == doctor_id and a.date == date and a.occupies_slot
        )

    @synchronized
    def is_slot_available(self, doctor_id: str, date: str, time: str) -> bool:
        return not any(
            a.doctor_id == doctor_id and a.date == date and a.time == time and a.occupies_slot
            for a in self._items
        )
