"""Registration, login and password endpoints"""
from fastapi import APIRouter, Depends, HTTPException, status
import logging

from medrecords.auth import create_access_token
from medrecords.dependencies import get_account_service, get_current_account
from medrecords.models import Account, Role
from medrecords.schemas import AccountResponse, LoginRequest, MessageResponse, PasswordChange, RegisterRequest, TokenResponse
from medrecords.services import AccountError, AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

PATIENT_FIELDS = ("name", "phone", "gender", "date_of_birth", "address", "medical_history")
DOCTOR_FIELDS = ("name", "phone", "gender", "date_of_birth", "specialization", "schedule", "consultation_fee")


def token_for(account: Account) -> TokenResponse:
    access_token = create_access_token(data={"sub": account.username, "role": account.role.value})
    return TokenResponse(access_token=access_token, account=AccountResponse.from_account(account))


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, accounts: AccountService = Depends(get_account_service)):
    """Register a patient or doctor together with its profile"""
    if data.role not in (Role.PATIENT, Role.DOCTOR):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only patient and doctor accounts can self-register"
        )

    try:
        if data.role == Role.PATIENT:
            accounts.register_patient(data.username, data.password,
                                      **data.model_dump(include=set(PATIENT_FIELDS)))
        else:
            accounts.register_doctor(data.username, data.password,
                                     **data.model_dump(include=set(DOCTOR_FIELDS)))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return token_for(accounts.accounts.get_by_username(data.username))


@router.post("/login", response_model=TokenResponse)
def login(credentials: LoginRequest, accounts: AccountService = Depends(get_account_service)):
    """Login with username and password"""
    account = accounts.login(credentials.username, credentials.password)
    if not account:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password"
        )
    return token_for(account)


@router.get("/me", response_model=AccountResponse)
def me(current_account: Account = Depends(get_current_account)):
    return AccountResponse.from_account(current_account)


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    data: PasswordChange,
    current_account: Account = Depends(get_current_account),
    accounts: AccountService = Depends(get_account_service)
):
    if not accounts.change_password(current_account.username, data.old_password, data.new_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password change failed"
        )
    return MessageResponse(message="Password changed")
