"""Department endpoints"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from medrecords.database import DataStore, get_store
from medrecords.dependencies import get_current_account, get_department_service, require_admin
from medrecords.models import Account, Department
from medrecords.schemas import DepartmentCreate, DoctorAssignment
from medrecords.services import DepartmentService

router = APIRouter(prefix="/api/departments", tags=["Departments"])


def get_department_or_404(store: DataStore, department_id: str) -> Department:
    department = store.departments.get_by_id(department_id)
    if not department:
        raise HTTPException(status_code=404, detail="Department not found")
    return department


@router.get("", response_model=List[Department])
def list_departments(
    current_account: Account = Depends(get_current_account),
    store: DataStore = Depends(get_store)
):
    return store.departments.get_all()


@router.post("", response_model=Department, status_code=status.HTTP_201_CREATED)
def create_department(
    data: DepartmentCreate,
    current_account: Account = Depends(require_admin),
    departments: DepartmentService = Depends(get_department_service)
):
    department = departments.create_department(data.name, data.description, data.location, data.phone)
    if not department:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Department name taken or phone number invalid"
        )
    return department


@router.post("/{department_id}/doctors", response_model=Department)
def assign_doctor(
    department_id: str,
    data: DoctorAssignment,
    current_account: Account = Depends(require_admin),
    store: DataStore = Depends(get_store),
    departments: DepartmentService = Depends(get_department_service)
):
    """Move a doctor into the department"""
    get_department_or_404(store, department_id)
    if not departments.assign_doctor(department_id, data.doctor_id):
        raise HTTPException(status_code=400, detail="Doctor could not be assigned")
    return store.departments.get_by_id(department_id)


@router.delete("/{department_id}/doctors/{doctor_id}", response_model=Department)
def unassign_doctor(
    department_id: str,
    doctor_id: str,
    current_account: Account = Depends(require_admin),
    store: DataStore = Depends(get_store),
    departments: DepartmentService = Depends(get_department_service)
):
    get_department_or_404(store, department_id)
    if not departments.unassign_doctor(department_id, doctor_id):
        raise HTTPException(status_code=400, detail="Doctor is not in this department")
    return store.departments.get_by_id(department_id)


@router.put("/{department_id}/head", response_model=Department)
def set_head(
    department_id: str,
    data: DoctorAssignment,
    current_account: Account = Depends(require_admin),
    store: DataStore = Depends(get_store),
    departments: DepartmentService = Depends(get_department_service)
):
    """Set the head of department; an empty doctor_id clears it"""
    get_department_or_404(store, department_id)
    if not departments.set_department_head(department_id, data.doctor_id):
        raise HTTPException(status_code=400, detail="Head of department could not be set")
    return store.departments.get_by_id(department_id)
