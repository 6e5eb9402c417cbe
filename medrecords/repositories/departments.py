from typing import List, Optional

from medrecords.codec import DEPARTMENT_CODEC
from medrecords.ids import DEPARTMENT_PREFIX
from medrecords.models import Department
from medrecords.repositories.base import FileRepository, contains_text


class DepartmentRepository(FileRepository[Department]):
    codec = DEPARTMENT_CODEC
    id_prefix = DEPARTMENT_PREFIX

    def get_by_name(self, name: str) -> Optional[Department]:
        wanted = name.strip().casefold()
        return self.find_one(lambda department: department.name.casefold() == wanted)

    def get_by_head_doctor(self, doctor_id: str) -> List[Department]:
        return self.find(lambda department: department.head_doctor_id == doctor_id)

    def get_department_by_doctor(self, doctor_id: str) -> Optional[Department]:
        return self.find_one(lambda department: department.has_doctor(doctor_id))

    def get_departments_by_doctor(self, doctor_id: str) -> List[Department]:
        return self.find(lambda department: department.has_doctor(doctor_id))

    def search_by_name(self, name: str) -> List[Department]:
        return self.find(lambda department: contains_text(department.name, name))

    def get_all_names(self) -> List[str]:
        return [department.name for department in self.get_all()]
