"""Account registration, login and password management"""
import logging
from typing import Optional, Protocol

from medrecords.database import DataStore
from medrecords.models import Account, Doctor, Patient, Role
from medrecords.passwords import BcryptHasher
from medrecords.repositories import StoreError
from medrecords.validators.password_validator import CredentialValidator

logger = logging.getLogger(__name__)


class CredentialHasher(Protocol):
    def hash(self, plain: str) -> str: ...

    def verify(self, plain: str, hashed: str) -> bool: ...


class AccountError(ValueError):
    """Registration or password change rejected; the message says why"""


class AccountService:
    def __init__(self, store: DataStore, hasher: Optional[CredentialHasher] = None):
        self.store = store
        self.hasher = hasher or BcryptHasher()

    @property
    def accounts(self):
        return self.store.accounts

    def is_username_available(self, username: str) -> bool:
        return not self.accounts.exists(username)

    def register_account(self, username: str, password: str, role: Role) -> Account:
        """
        Create an active account.

        Raises:
            AccountError: invalid username/password, unknown role or taken username
        """
        ok, message = CredentialValidator.validate_username(username)
        if not ok:
            raise AccountError(message)
        ok, message = CredentialValidator.validate_password(password)
        if not ok:
            raise AccountError(message)
        if role == Role.UNKNOWN:
            raise AccountError("A role is required")

        account = Account(
            username=username,
            password_hash=self.hasher.hash(password),
            role=role,
            is_active=True,
            created_date=self.store.clock.today(),
        )
        if not self.accounts.add(account):
            if self.accounts.last_error == StoreError.DUPLICATE:
                raise AccountError("Username already exists")
            raise AccountError("Could not save account")
        logger.info(f"Registered {role.value} account {username}")
        return account

    def login(self, username: str, password: str) -> Optional[Account]:
        """The account for valid credentials of an active user, else None"""
        if self.accounts.validate_credentials(username, lambda hashed: self.hasher.verify(password, hashed)):
            return self.accounts.get_by_username(username)
        logger.info(f"Failed login for {username}")
        return None

    def change_password(self, username: str, old_password: str, new_password: str) -> bool:
        account = self.accounts.get_by_username(username)
        if account is None or not self.hasher.verify(old_password, account.password_hash):
            return False
        return self.reset_password(username, new_password)

    def reset_password(self, username: str, new_password: str) -> bool:
        ok, message = CredentialValidator.validate_password(new_password)
        if not ok:
            logger.info(f"Password change for {username} rejected: {message}")
            return False
        with self.accounts.locked():
            account = self.accounts.get_by_username(username)
            if account is None:
                return False
            account.password_hash = self.hasher.hash(new_password)
            return self.accounts.update(account)

    def _set_active(self, username: str, active: bool) -> bool:
        with self.accounts.locked():
            account = self.accounts.get_by_username(username)
            if account is None:
                return False
            account.is_active = active
            return self.accounts.update(account)

    def activate_account(self, username: str) -> bool:
        return self._set_active(username, True)

    def deactivate_account(self, username: str) -> bool:
        return self._set_active(username, False)

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def register_patient(self, username: str, password: str, **profile) -> Patient:
        """Register a patient account together with its Pxxx profile"""
        patients = self.store.patients
        with patients.locked():
            patient = Patient(patient_id=patients.get_next_id(), username=username, **profile)
            if patients.get_by_username(username) is not None:
                raise AccountError("Patient profile already exists")
            self.register_account(username, password, Role.PATIENT)
            if not patients.add(patient):
                raise AccountError("Could not save patient profile")
        return patient

    def register_doctor(self, username: str, password: str, **profile) -> Doctor:
        """Register a doctor account together with its Dxxx profile"""
        doctors = self.store.doctors
        with doctors.locked():
            doctor = Doctor(doctor_id=doctors.get_next_id(), username=username, **profile)
            if doctors.get_by_username(username) is not None:
                raise AccountError("Doctor profile already exists")
            self.register_account(username, password, Role.DOCTOR)
            if not doctors.add(doctor):
                raise AccountError("Could not save doctor profile")
        return doctor
