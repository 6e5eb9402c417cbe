"""Doctor directory endpoints"""
from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional

from medrecords.database import DataStore, get_store
from medrecords.dependencies import get_current_account
from medrecords.models import Account, Doctor

router = APIRouter(prefix="/api/doctors", tags=["Doctors"])


@router.get("", response_model=List[Doctor])
def list_doctors(
    specialization: Optional[str] = None,
    q: Optional[str] = None,
    current_account: Account = Depends(get_current_account),
    store: DataStore = Depends(get_store)
):
    if specialization:
        return store.doctors.get_by_specialization(specialization)
    if q:
        return store.doctors.search(q)
    return store.doctors.get_all()


@router.get("/specializations", response_model=List[str])
def list_specializations(
    current_account: Account = Depends(get_current_account),
    store: DataStore = Depends(get_store)
):
    return store.doctors.get_all_specializations()


@router.get("/{doctor_id}", response_model=Doctor)
def get_doctor(
    doctor_id: str,
    current_account: Account = Depends(get_current_account),
    store: DataStore = Depends(get_store)
):
    doctor = store.doctors.get_by_id(doctor_id)
    if not doctor:
        raise HTTPException(status_code=404, detail="Doctor not found")
    return doctor
