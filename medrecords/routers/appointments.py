"""Appointment booking endpoints"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
import logging

from medrecords.database import DataStore, get_store
from medrecords.dependencies import get_booking_service, get_current_account, require_admin, require_roles
from medrecords.models import Account, Appointment, Role
from medrecords.routers.common import doctor_id_for, get_visible_appointment
from medrecords.schemas import BookingRequest, RescheduleRequest, SlotsResponse
from medrecords.services import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


@router.get("/slots", response_model=SlotsResponse)
def get_available_slots(
    doctor_id: str,
    date: str,
    current_account: Account = Depends(get_current_account),
    booking: BookingService = Depends(get_booking_service)
):
    """Free slots for a doctor on a date"""
    return SlotsResponse(doctor_id=doctor_id, date=date,
                         available=booking.get_available_slots(doctor_id, date))


@router.post("", response_model=Appointment, status_code=status.HTTP_201_CREATED)
def book_appointment(
    data: BookingRequest,
    current_account: Account = Depends(require_roles([Role.PATIENT, Role.ADMIN])),
    booking: BookingService = Depends(get_booking_service)
):
    """Book an appointment; patients book for themselves, admins for anyone"""
    patient_username = current_account.username
    if current_account.role == Role.ADMIN:
        if not data.patient_username:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="patient_username is required"
            )
        patient_username = data.patient_username

    problem = booking.check_booking(patient_username, data.doctor_id, data.date, data.time)
    if problem:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=problem)

    appointment = booking.book_appointment(patient_username, data.doctor_id, data.date, data.time,
                                           disease=data.disease, notes=data.notes)
    if not appointment:
        # Lost the slot between the check and the booking
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Appointment could not be booked"
        )
    return appointment


@router.get("/mine", response_model=List[Appointment])
def get_my_appointments(
    upcoming: bool = False,
    current_account: Account = Depends(require_roles([Role.PATIENT, Role.DOCTOR])),
    store: DataStore = Depends(get_store)
):
    if current_account.role == Role.PATIENT:
        if upcoming:
            return store.appointments.get_upcoming_by_patient(current_account.username)
        return store.appointments.get_by_patient(current_account.username)

    doctor_id = doctor_id_for(store, current_account)
    if upcoming:
        return store.appointments.get_upcoming_by_doctor(doctor_id)
    return store.appointments.get_by_doctor(doctor_id)


@router.get("/{appointment_id}", response_model=Appointment)
def get_appointment(
    appointment_id: str,
    current_account: Account = Depends(get_current_account),
    store: DataStore = Depends(get_store)
):
    return get_visible_appointment(store, current_account, appointment_id)


def reject(detail: str):
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.put("/{appointment_id}/reschedule", response_model=Appointment)
def reschedule_appointment(
    appointment_id: str,
    data: RescheduleRequest,
    current_account: Account = Depends(get_current_account),
    store: DataStore = Depends(get_store),
    booking: BookingService = Depends(get_booking_service)
):
    get_visible_appointment(store, current_account, appointment_id)
    if not booking.reschedule_appointment(appointment_id, data.date, data.time):
        reject("Appointment cannot be moved to that slot")
    return store.appointments.get_by_id(appointment_id)


@router.post("/{appointment_id}/cancel", response_model=Appointment)
def cancel_appointment(
    appointment_id: str,
    current_account: Account = Depends(get_current_account),
    store: DataStore = Depends(get_store),
    booking: BookingService = Depends(get_booking_service)
):
    get_visible_appointment(store, current_account, appointment_id)
    if not booking.cancel_appointment(appointment_id):
        reject("Only upcoming scheduled appointments can be cancelled")
    return store.appointments.get_by_id(appointment_id)


@router.post("/{appointment_id}/complete", response_model=Appointment)
def complete_appointment(
    appointment_id: str,
    current_account: Account = Depends(require_roles([Role.DOCTOR, Role.ADMIN])),
    store: DataStore = Depends(get_store),
    booking: BookingService = Depends(get_booking_service)
):
    get_visible_appointment(store, current_account, appointment_id)
    if not booking.mark_as_completed(appointment_id):
        reject("Only scheduled appointments can be completed")
    return store.appointments.get_by_id(appointment_id)


@router.post("/{appointment_id}/no-show", response_model=Appointment)
def mark_no_show(
    appointment_id: str,
    current_account: Account = Depends(require_roles([Role.DOCTOR, Role.ADMIN])),
    store: DataStore = Depends(get_store),
    booking: BookingService = Depends(get_booking_service)
):
    get_visible_appointment(store, current_account, appointment_id)
    if not booking.mark_as_no_show(appointment_id):
        reject("Only scheduled appointments can be marked as no-show")
    return store.appointments.get_by_id(appointment_id)


@router.post("/{appointment_id}/pay", response_model=Appointment)
def mark_paid(
    appointment_id: str,
    current_account: Account = Depends(require_admin),
    store: DataStore = Depends(get_store),
    booking: BookingService = Depends(get_booking_service)
):
    get_visible_appointment(store, current_account, appointment_id)
    if not booking.mark_as_paid(appointment_id):
        reject("Cancelled appointments cannot be paid")
    return store.appointments.get_by_id(appointment_id)
