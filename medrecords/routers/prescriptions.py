"""Prescription and dispensing endpoints"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from medrecords.database import DataStore, get_store
from medrecords.dependencies import get_current_account, get_dispensing_service, require_admin, require_doctor
from medrecords.models import Account, Prescription, Role
from medrecords.routers.common import doctor_id_for, get_visible_appointment
from medrecords.schemas import PrescriptionCreate, PrescriptionItemRequest
from medrecords.services import DispenseResult, DispensingService
from medrecords.services.dispensing import INSUFFICIENT_STOCK, PRESCRIPTION_NOT_FOUND

router = APIRouter(prefix="/api/prescriptions", tags=["Prescriptions"])


def get_prescription_or_404(store: DataStore, prescription_id: str) -> Prescription:
    prescription = store.prescriptions.get_by_id(prescription_id)
    if not prescription:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prescription not found"
        )
    return prescription


def get_own_prescription(store: DataStore, account: Account, prescription_id: str) -> Prescription:
    """Prescription written by the calling doctor"""
    prescription = get_prescription_or_404(store, prescription_id)
    if prescription.doctor_id != doctor_id_for(store, account):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only change your own prescriptions"
        )
    return prescription


@router.post("", response_model=Prescription, status_code=status.HTTP_201_CREATED)
def create_prescription(
    data: PrescriptionCreate,
    current_account: Account = Depends(require_doctor),
    store: DataStore = Depends(get_store),
    dispensing: DispensingService = Depends(get_dispensing_service)
):
    """Create prescription for an appointment (doctors only)"""
    get_visible_appointment(store, current_account, data.appointment_id)

    if store.prescriptions.get_by_appointment(data.appointment_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Prescription already exists for this appointment"
        )

    prescription = dispensing.create_prescription(data.appointment_id, data.diagnosis, data.notes)
    if not prescription:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Prescription could not be created"
        )
    return prescription


@router.get("", response_model=List[Prescription])
def get_my_prescriptions(
    current_account: Account = Depends(get_current_account),
    store: DataStore = Depends(get_store)
):
    """Get prescriptions based on role"""
    if current_account.role == Role.PATIENT:
        return store.prescriptions.get_by_patient(current_account.username)
    if current_account.role == Role.DOCTOR:
        return store.prescriptions.get_by_doctor(doctor_id_for(store, current_account))
    return store.prescriptions.get_undispensed()


@router.get("/{prescription_id}", response_model=Prescription)
def get_prescription(
    prescription_id: str,
    current_account: Account = Depends(get_current_account),
    store: DataStore = Depends(get_store)
):
    prescription = get_prescription_or_404(store, prescription_id)
    allowed = (
        current_account.role == Role.ADMIN
        or (current_account.role == Role.PATIENT and prescription.patient_username == current_account.username)
        or (current_account.role == Role.DOCTOR and prescription.doctor_id == doctor_id_for(store, current_account))
    )
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to view this prescription"
        )
    return prescription


@router.post("/{prescription_id}/items", response_model=Prescription)
def add_item(
    prescription_id: str,
    item: PrescriptionItemRequest,
    current_account: Account = Depends(require_doctor),
    store: DataStore = Depends(get_store),
    dispensing: DispensingService = Depends(get_dispensing_service)
):
    """Add or replace an item"""
    get_own_prescription(store, current_account, prescription_id)
    if not dispensing.add_prescription_item(prescription_id, item.medicine_id, item.quantity,
                                            item.dosage, item.duration, item.instructions):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Item could not be added (unknown medicine or prescription already dispensed)"
        )
    return store.prescriptions.get_by_id(prescription_id)


@router.delete("/{prescription_id}/items/{medicine_id}", response_model=Prescription)
def remove_item(
    prescription_id: str,
    medicine_id: str,
    current_account: Account = Depends(require_doctor),
    store: DataStore = Depends(get_store),
    dispensing: DispensingService = Depends(get_dispensing_service)
):
    get_own_prescription(store, current_account, prescription_id)
    if not dispensing.remove_prescription_item(prescription_id, medicine_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Item could not be removed"
        )
    return store.prescriptions.get_by_id(prescription_id)


@router.get("/{prescription_id}/dispense-check", response_model=DispenseResult)
def check_dispense(
    prescription_id: str,
    current_account: Account = Depends(require_admin),
    store: DataStore = Depends(get_store),
    dispensing: DispensingService = Depends(get_dispensing_service)
):
    """Report whether dispensing would succeed, without touching stock"""
    get_prescription_or_404(store, prescription_id)
    failed = dispensing.get_insufficient_stock_items(prescription_id)
    return DispenseResult(
        success=dispensing.can_dispense(prescription_id),
        message=INSUFFICIENT_STOCK if failed else "Ready to dispense",
        total_cost=dispensing.calculate_prescription_cost(prescription_id) or 0.0,
        failed_items=failed,
    )


@router.post("/{prescription_id}/dispense", response_model=DispenseResult)
def dispense(
    prescription_id: str,
    current_account: Account = Depends(require_admin),
    dispensing: DispensingService = Depends(get_dispensing_service)
):
    result = dispensing.dispense_prescription(prescription_id)
    if not result.success and result.message == PRESCRIPTION_NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.message)
    return result


@router.post("/{prescription_id}/undispense", response_model=Prescription)
def undispense(
    prescription_id: str,
    current_account: Account = Depends(require_admin),
    store: DataStore = Depends(get_store),
    dispensing: DispensingService = Depends(get_dispensing_service)
):
    """Clear the dispensed flag; stock is not put back"""
    get_prescription_or_404(store, prescription_id)
    dispensing.mark_as_undispensed(prescription_id)
    return store.prescriptions.get_by_id(prescription_id)
