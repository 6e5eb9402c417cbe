"""Lookups shared by several routers"""
from fastapi import HTTPException, status

from medrecords.database import DataStore
from medrecords.models import Account, Appointment, Role


def doctor_id_for(store: DataStore, account: Account) -> str:
    """Doctor ID linked to a doctor account, or an empty string"""
    doctor = store.doctors.get_by_username(account.username)
    return doctor.doctor_id if doctor else ""


def can_see_appointment(store: DataStore, account: Account, appointment: Appointment) -> bool:
    if account.role == Role.ADMIN:
        return True
    if account.role == Role.PATIENT:
        return appointment.patient_username == account.username
    if account.role == Role.DOCTOR:
        return appointment.doctor_id == doctor_id_for(store, account)
    return False


def get_visible_appointment(store: DataStore, account: Account, appointment_id: str) -> Appointment:
    appointment = store.appointments.get_by_id(appointment_id)
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found"
        )
    if not can_see_appointment(store, account, appointment):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access this appointment"
        )
    return appointment
