from typing import List, Optional

from medrecords.codec import DOCTOR_CODEC
from medrecords.ids import DOCTOR_PREFIX
from medrecords.models import Doctor
from medrecords.repositories.base import FileRepository, contains_text


class DoctorRepository(FileRepository[Doctor]):
    codec = DOCTOR_CODEC
    id_prefix = DOCTOR_PREFIX

    def conflicts(self, candidate: Doctor, existing: Doctor) -> bool:
        return candidate.username == existing.username

    def get_by_username(self, username: str) -> Optional[Doctor]:
        return self.find_one(lambda doctor: doctor.username == username)

    def get_by_specialization(self, specialization: str) -> List[Doctor]:
        wanted = specialization.strip().casefold()
        return self.find(lambda doctor: doctor.specialization.casefold() == wanted)

    def search_by_name(self, name: str) -> List[Doctor]:
        return self.find(lambda doctor: contains_text(doctor.name, name))

    def search(self, query: str) -> List[Doctor]:
        return self.find(lambda doctor: any(
            contains_text(value, query)
            for value in (doctor.doctor_id, doctor.username, doctor.name, doctor.specialization)
        ))

    def get_all_specializations(self) -> List[str]:
        return sorted({doctor.specialization for doctor in self.get_all() if doctor.specialization})
