"""
The data store: one repository per entity kind over one data directory.

Built once per process by get_store() and handed to services and routes, instead of
each repository keeping a global instance of its own.
"""

import logging
import threading
from pathlib import Path
from typing import Optional, Union

from medrecords.config import get_settings
from medrecords.filestore import FileStore
from medrecords.repositories import (
    AccountRepository,
    AppointmentRepository,
    DepartmentRepository,
    DoctorRepository,
    MedicineRepository,
    PatientRepository,
    PrescriptionRepository,
)
from medrecords.validators.time_validator import Clock, system_clock

logger = logging.getLogger(__name__)

BACKUP_DIR_NAME = "backup"


class DataStore:
    def __init__(self, data_dir: Union[str, Path], clock: Clock = system_clock):
        self.data_dir = Path(data_dir)
        self.clock = clock
        self.file_store = FileStore(self.data_dir / BACKUP_DIR_NAME)

        self.accounts = AccountRepository(self.path_for("Account"), self.file_store)
        self.patients = PatientRepository(self.path_for("Patient"), self.file_store)
        self.doctors = DoctorRepository(self.path_for("Doctor"), self.file_store)
        self.appointments = AppointmentRepository(self.path_for("Appointment"), self.file_store, clock)
        self.medicines = MedicineRepository(self.path_for("Medicine"), self.file_store, clock)
        self.prescriptions = PrescriptionRepository(self.path_for("Prescription"), self.file_store)
        self.departments = DepartmentRepository(self.path_for("Department"), self.file_store)

    def path_for(self, kind: str) -> Path:
        return self.data_dir / f"{kind}.txt"

    @property
    def repositories(self):
        return [self.accounts, self.patients, self.doctors, self.appointments,
                self.medicines, self.prescriptions, self.departments]

    def initialize(self) -> bool:
        """Create the data directory and load every repository"""
        if not self.file_store.create_directory_if_not_exists(self.data_dir):
            return False
        ok = True
        for repository in self.repositories:
            ok = repository.load() and ok
            if repository.skipped_lines:
                logger.warning(f"{repository.kind}: skipped {repository.skipped_lines} malformed lines")
        logger.info(f"Data store ready at {self.data_dir}")
        return ok


_store: Optional[DataStore] = None
_store_lock = threading.Lock()


def get_store() -> DataStore:
    """Process-wide store, created on first use from HMS_DATA_DIR"""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = DataStore(get_settings().data_dir)
    return _store


def set_store(store: DataStore) -> None:
    global _store
    with _store_lock:
        _store = store


def reset_store() -> None:
    global _store
    with _store_lock:
        _store = None
