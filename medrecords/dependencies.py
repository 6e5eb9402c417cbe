from typing import List
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from medrecords.auth import decode_token
from medrecords.config import get_settings
from medrecords.database import DataStore, get_store
from medrecords.models import Account, Role
from medrecords.passwords import BcryptHasher
from medrecords.services import (
    AccountService,
    BookingService,
    DepartmentService,
    DispensingService,
    MedicineService,
)

security = HTTPBearer()


def get_account_service(store: DataStore = Depends(get_store)) -> AccountService:
    return AccountService(store, BcryptHasher(get_settings().bcrypt_rounds))


def get_booking_service(store: DataStore = Depends(get_store)) -> BookingService:
    return BookingService(store)


def get_dispensing_service(store: DataStore = Depends(get_store)) -> DispensingService:
    return DispensingService(store)


def get_medicine_service(store: DataStore = Depends(get_store)) -> MedicineService:
    return MedicineService(store)


def get_department_service(store: DataStore = Depends(get_store)) -> DepartmentService:
    return DepartmentService(store)


def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    store: DataStore = Depends(get_store)
) -> Account:
    """Get current authenticated account"""
    payload = decode_token(credentials.credentials)

    if not payload or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )

    account = store.accounts.get_by_username(payload.get("sub", ""))

    if not account:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Account not found"
        )

    if not account.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive account"
        )

    return account


def require_roles(allowed_roles: List[Role]):
    """Dependency factory for role-based access control"""
    def role_checker(current_account: Account = Depends(get_current_account)) -> Account:
        if current_account.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {', '.join([r.value for r in allowed_roles])}"
            )
        return current_account
    return role_checker


# Convenience dependencies for common role checks
def require_admin(current_account: Account = Depends(get_current_account)) -> Account:
    if current_account.role != Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_account


def require_doctor(current_account: Account = Depends(get_current_account)) -> Account:
    if current_account.role != Role.DOCTOR:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Doctor access required"
        )
    return current_account
