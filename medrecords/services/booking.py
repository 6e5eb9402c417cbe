"""
Appointment booking

Fixed half-hour slot table shared by every doctor, booking validation and the
appointment status state machine:

    scheduled -> completed | cancelled | no_show

Terminal states never transition again.
"""

import logging
from collections import Counter
from typing import Dict, List, Optional

from medrecords.database import DataStore
from medrecords.models import Appointment, AppointmentStatus
from medrecords.validators.business_rules import get_business_rules
from medrecords.validators.time_validator import Clock, is_valid_date, is_valid_time

logger = logging.getLogger(__name__)


def standard_slots() -> List[str]:
    """08:00, 08:30 ... 16:30 with the default rules"""
    rules = get_business_rules()
    slots = []
    minutes = rules.SLOT_START_HOUR * 60
    while minutes < rules.SLOT_END_HOUR * 60:
        slots.append(f"{minutes // 60:02d}:{minutes % 60:02d}")
        minutes += rules.SLOT_DURATION_MINUTES
    return slots


def is_standard_slot(time: str) -> bool:
    return time in standard_slots()


class BookingService:
    def __init__(self, store: DataStore, clock: Optional[Clock] = None):
        self.store = store
        self.clock = clock or store.clock

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    def is_past(self, date: str, time: str = "") -> bool:
        """A date before today, or today at or before the current time"""
        today = self.clock.today()
        if date < today:
            return True
        if date == today and time:
            return time <= self.clock.current_time()
        return False

    def get_available_slots(self, doctor_id: str, date: str) -> List[str]:
        if not is_valid_date(date):
            return []
        booked = set(self.store.appointments.get_booked_slots(doctor_id, date))
        return [slot for slot in standard_slots() if slot not in booked and not self.is_past(date, slot)]

    def is_slot_available(self, doctor_id: str, date: str, time: str) -> bool:
        return self.store.appointments.is_slot_available(doctor_id, date, time)

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def check_schedule(self, date: str, time: str) -> Optional[str]:
        """Rules shared by booking and rescheduling; first failure wins"""
        if not is_valid_date(date):
            return f"Invalid date '{date}', expected YYYY-MM-DD"
        if not is_valid_time(time):
            return f"Invalid time '{time}', expected HH:MM"
        if date < self.clock.today():
            return "Cannot book an appointment in the past"
        if self.is_past(date, time):
            return "Cannot book a time that has already passed today"
        if not is_standard_slot(time):
            return f"{time} is not a bookable slot"
        return None

    def check_booking(self, patient_username: str, doctor_id: str, date: str, time: str) -> Optional[str]:
        """Return the first rule the booking would break, or None if it can go ahead"""
        problem = self.check_schedule(date, time)
        if problem:
            return problem
        if self.store.patients.get_by_username(patient_username) is None:
            return f"Patient '{patient_username}' not found"
        if not self.store.doctors.exists(doctor_id):
            return f"Doctor '{doctor_id}' not found"
        if not self.is_slot_available(doctor_id, date, time):
            return f"Slot {date} {time} is already booked for doctor {doctor_id}"
        return None

    def book_appointment(self, patient_username: str, doctor_id: str, date: str, time: str,
                         disease: str = "", notes: str = "") -> Optional[Appointment]:
        appointments = self.store.appointments
        with appointments.locked():
            problem = self.check_booking(patient_username, doctor_id, date, time)
            if problem:
                logger.info(f"Booking rejected for {patient_username}: {problem}")
                return None

            doctor = self.store.doctors.get_by_id(doctor_id)
            appointment = Appointment(
                appointment_id=appointments.get_next_id(),
                patient_username=patient_username,
                doctor_id=doctor_id,
                date=date,
                time=time,
                disease=disease,
                price=doctor.consultation_fee,
                is_paid=False,
                status=AppointmentStatus.SCHEDULED,
                notes=notes,
            )
            if not appointments.add(appointment):
                logger.error(f"Failed to store appointment {appointment.appointment_id}: {appointments.last_error}")
                return None

        logger.info(f"Booked {appointment.appointment_id} for {patient_username} with {doctor_id} on {date} {time}")
        return appointment

    # ------------------------------------------------------------------
    # Changes to scheduled appointments
    # ------------------------------------------------------------------

    def _editable(self, appointment_id: str) -> Optional[Appointment]:
        appointment = self.store.appointments.get_by_id(appointment_id)
        if appointment is None:
            return None
        if appointment.status != AppointmentStatus.SCHEDULED:
            logger.info(f"Appointment {appointment_id} is {appointment.status.value}, not editable")
            return None
        if appointment.date < self.clock.today():
            logger.info(f"Appointment {appointment_id} is in the past, not editable")
            return None
        return appointment

    def can_modify(self, appointment_id: str) -> bool:
        return self._editable(appointment_id) is not None

    def cancel_appointment(self, appointment_id: str) -> bool:
        appointments = self.store.appointments
        with appointments.locked():
            appointment = self._editable(appointment_id)
            if appointment is None:
                return False
            appointment.status = AppointmentStatus.CANCELLED
            if not appointments.update(appointment):
                return False
        logger.info(f"Cancelled appointment {appointment_id}")
        return True

    def edit_appointment(self, appointment_id: str, new_date: str, new_time: str) -> bool:
        appointments = self.store.appointments
        with appointments.locked():
            appointment = self._editable(appointment_id)
            if appointment is None:
                return False
            problem = self.check_schedule(new_date, new_time)
            if problem:
                logger.info(f"Reschedule of {appointment_id} rejected: {problem}")
                return False
            unchanged = (appointment.date, appointment.time) == (new_date, new_time)
            if not unchanged and not self.is_slot_available(appointment.doctor_id, new_date, new_time):
                logger.info(f"Reschedule of {appointment_id} rejected: slot {new_date} {new_time} taken")
                return False
            appointment.date = new_date
            appointment.time = new_time
            if not appointments.update(appointment):
                return False
        logger.info(f"Moved appointment {appointment_id} to {new_date} {new_time}")
        return True

    def reschedule_appointment(self, appointment_id: str, new_date: str, new_time: str) -> bool:
        return self.edit_appointment(appointment_id, new_date, new_time)

    def _finish(self, appointment_id: str, status: AppointmentStatus) -> bool:
        appointments = self.store.appointments
        with appointments.locked():
            appointment = appointments.get_by_id(appointment_id)
            if appointment is None or appointment.status != AppointmentStatus.SCHEDULED:
                return False
            appointment.status = status
            if not appointments.update(appointment):
                return False
        logger.info(f"Appointment {appointment_id} marked {status.value}")
        return True

    def mark_as_completed(self, appointment_id: str) -> bool:
        return self._finish(appointment_id, AppointmentStatus.COMPLETED)

    def mark_as_no_show(self, appointment_id: str) -> bool:
        return self._finish(appointment_id, AppointmentStatus.NO_SHOW)

    def mark_as_paid(self, appointment_id: str) -> bool:
        appointments = self.store.appointments
        with appointments.locked():
            appointment = appointments.get_by_id(appointment_id)
            if appointment is None or appointment.status == AppointmentStatus.CANCELLED:
                return False
            if appointment.is_paid:
                return True
            appointment.is_paid = True
            return appointments.update(appointment)

    def update_notes(self, appointment_id: str, notes: str) -> bool:
        appointments = self.store.appointments
        with appointments.locked():
            appointment = appointments.get_by_id(appointment_id)
            if appointment is None:
                return False
            try:
                appointment.notes = notes
            except ValueError:
                return False
            return appointments.update(appointment)

    # ------------------------------------------------------------------
    # Figures
    # ------------------------------------------------------------------

    def get_total_revenue(self) -> float:
        """Booked revenue: every appointment that was not cancelled, paid or not"""
        return sum(a.price for a in self.store.appointments.get_all()
                   if a.status != AppointmentStatus.CANCELLED)

    def get_paid_revenue(self) -> float:
        return sum(a.price for a in self.store.appointments.get_all()
                   if a.is_paid and a.status != AppointmentStatus.CANCELLED)

    def get_unpaid_revenue(self) -> float:
        return sum(a.price for a in self.store.appointments.get_all()
                   if not a.is_paid and a.status != AppointmentStatus.CANCELLED)

    def get_count_by_status(self) -> Dict[AppointmentStatus, int]:
        counts = Counter(a.status for a in self.store.appointments.get_all())
        return {status: counts.get(status, 0) for status in AppointmentStatus}
