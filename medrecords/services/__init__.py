from medrecords.services.accounts import AccountError, AccountService
from medrecords.services.booking import BookingService
from medrecords.services.departments import DepartmentService
from medrecords.services.dispensing import DispenseResult, DispensingService
from medrecords.services.medicines import MedicineService

__all__ = [
    "AccountError",
    "AccountService",
    "BookingService",
    "DepartmentService",
    "DispenseResult",
    "DispensingService",
    "MedicineService",
]
