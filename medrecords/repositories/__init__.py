from medrecords.repositories.base import FileRepository, StoreError
from medrecords.repositories.accounts import AccountRepository
from medrecords.repositories.patients import PatientRepository
from medrecords.repositories.doctors import DoctorRepository
from medrecords.repositories.appointments import AppointmentRepository
from medrecords.repositories.medicines import MedicineRepository
from medrecords.repositories.prescriptions import PrescriptionRepository
from medrecords.repositories.departments import DepartmentRepository

__all__ = [
    "FileRepository",
    "StoreError",
    "AccountRepository",
    "PatientRepository",
    "DoctorRepository",
    "AppointmentRepository",
    "MedicineRepository",
    "PrescriptionRepository",
    "DepartmentRepository",
]
