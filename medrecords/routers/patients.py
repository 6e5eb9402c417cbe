"""Patient record endpoints"""
from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional

from medrecords.database import DataStore, get_store
from medrecords.dependencies import require_roles
from medrecords.models import Account, Appointment, Patient, Role

router = APIRouter(prefix="/api/patients", tags=["Patients"])


@router.get("/me", response_model=Patient)
def get_my_profile(
    current_account: Account = Depends(require_roles([Role.PATIENT])),
    store: DataStore = Depends(get_store)
):
    patient = store.patients.get_by_username(current_account.username)
    if not patient:
        raise HTTPException(status_code=404, detail="Patient profile not found")
    return patient


@router.get("/me/history", response_model=List[Appointment])
def get_my_history(
    current_account: Account = Depends(require_roles([Role.PATIENT])),
    store: DataStore = Depends(get_store)
):
    """Past and closed appointments"""
    return store.appointments.get_history_by_patient(current_account.username)


@router.get("", response_model=List[Patient])
def list_patients(
    q: Optional[str] = None,
    current_account: Account = Depends(require_roles([Role.DOCTOR, Role.ADMIN])),
    store: DataStore = Depends(get_store)
):
    if q:
        return store.patients.search(q)
    return store.patients.get_all()


@router.get("/{patient_id}", response_model=Patient)
def get_patient(
    patient_id: str,
    current_account: Account = Depends(require_roles([Role.DOCTOR, Role.ADMIN])),
    store: DataStore = Depends(get_store)
):
    patient = store.patients.get_by_id(patient_id)
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")
    return patient
