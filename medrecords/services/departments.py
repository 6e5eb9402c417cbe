"""Departments and their doctors"""
import logging
from typing import Optional

from medrecords.database import DataStore
from medrecords.models import Department, Doctor
from medrecords.validators.password_validator import is_valid_phone

logger = logging.getLogger(__name__)


class DepartmentService:
    def __init__(self, store: DataStore):
        self.store = store

    @property
    def departments(self):
        return self.store.departments

    def _name_taken(self, name: str, exclude_id: str = "") -> bool:
        existing = self.departments.get_by_name(name)
        return existing is not None and existing.department_id != exclude_id

    def create_department(self, name: str, description: str = "", location: str = "",
                          phone: str = "") -> Optional[Department]:
        name = name.strip()
        if not name:
            return None
        if phone and not is_valid_phone(phone):
            logger.info(f"Rejected department '{name}': invalid phone '{phone}'")
            return None
        with self.departments.locked():
            if self._name_taken(name):
                logger.info(f"Department '{name}' already exists")
                return None
            try:
                department = Department(
                    department_id=self.departments.get_next_id(),
                    name=name,
                    description=description,
                    location=location,
                    phone=phone,
                )
            except ValueError as e:
                logger.info(f"Rejected department '{name}': {e}")
                return None
            if not self.departments.add(department):
                return None
        logger.info(f"Created department {department.department_id} ({name})")
        return department

    def update_department(self, department: Department) -> bool:
        if department.phone and not is_valid_phone(department.phone):
            return False
        with self.departments.locked():
            if self._name_taken(department.name, department.department_id):
                return False
            return self.departments.update(department)

    def delete_department(self, department_id: str) -> bool:
        return self.departments.remove(department_id)

    def assign_doctor(self, department_id: str, doctor_id: str) -> bool:
        """Put a doctor in a department, taking them out of any other one first"""
        if not self.store.doctors.exists(doctor_id):
            return False
        with self.departments.locked():
            department = self.departments.get_by_id(department_id)
            if department is None:
                return False
            if department.has_doctor(doctor_id):
                return True
            for other in self.departments.get_departments_by_doctor(doctor_id):
                self._drop_member(other, doctor_id)
                if not self.departments.update(other):
                    return False
            department.add_doctor(doctor_id)
            if not self.departments.update(department):
                return False
        logger.info(f"Assigned doctor {doctor_id} to {department_id}")
        return True

    @staticmethod
    def _drop_member(department: Department, doctor_id: str) -> bool:
        removed = department.remove_doctor(doctor_id)
        if department.head_doctor_id == doctor_id:
            department.head_doctor_id = ""
        return removed

    def unassign_doctor(self, department_id: str, doctor_id: str) -> bool:
        with self.departments.locked():
            department = self.departments.get_by_id(department_id)
            if department is None or not self._drop_member(department, doctor_id):
                return False
            return self.departments.update(department)

    def set_department_head(self, department_id: str, doctor_id: str) -> bool:
        """Make a doctor head of department; an empty doctor_id clears the head"""
        if doctor_id and not self.store.doctors.exists(doctor_id):
            return False
        if doctor_id and not self.assign_doctor(department_id, doctor_id):
            return False
        with self.departments.locked():
            department = self.departments.get_by_id(department_id)
            if department is None:
                return False
            department.head_doctor_id = doctor_id
            return self.departments.update(department)

    def get_department_head(self, department_id: str) -> Optional[Doctor]:
        department = self.departments.get_by_id(department_id)
        if department is None or not department.head_doctor_id:
            return None
        return self.store.doctors.get_by_id(department.head_doctor_id)

    def is_doctor_in_department(self, department_id: str, doctor_id: str) -> bool:
        department = self.departments.get_by_id(department_id)
        return department is not None and department.has_doctor(doctor_id)
