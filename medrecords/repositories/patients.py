from typing import List, Optional

from medrecords.codec import PATIENT_CODEC
from medrecords.ids import PATIENT_PREFIX
from medrecords.models import Patient
from medrecords.repositories.base import FileRepository, contains_text


class PatientRepository(FileRepository[Patient]):
    codec = PATIENT_CODEC
    id_prefix = PATIENT_PREFIX

    def conflicts(self, candidate: Patient, existing: Patient) -> bool:
        return candidate.username == existing.username

    def get_by_username(self, username: str) -> Optional[Patient]:
        return self.find_one(lambda patient: patient.username == username)

    def search_by_name(self, name: str) -> List[Patient]:
        return self.find(lambda patient: contains_text(patient.name, name))

    def search_by_phone(self, phone: str) -> List[Patient]:
        return self.find(lambda patient: phone.strip() in patient.phone)

    def search(self, query: str) -> List[Patient]:
        """Match ID, username, name or phone"""
        return self.find(lambda patient: any(
            contains_text(value, query)
            for value in (patient.patient_id, patient.username, patient.name, patient.phone)
        ))
