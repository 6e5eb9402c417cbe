from typing import List

from medrecords.codec import MEDICINE_CODEC
from medrecords.ids import MEDICINE_PREFIX
from medrecords.models import Medicine
from medrecords.repositories.base import FileRepository, StoreError, contains_text, synchronized
from medrecords.validators.business_rules import get_business_rules
from medrecords.validators.time_validator import Clock, system_clock


class MedicineRepository(FileRepository[Medicine]):
    codec = MEDICINE_CODEC
    id_prefix = MEDICINE_PREFIX

    def __init__(self, file_path, file_store, clock: Clock = system_clock):
        super().__init__(file_path, file_store)
        self.clock = clock

    def conflicts(self, candidate: Medicine, existing: Medicine) -> bool:
        return candidate.identity_key == existing.identity_key

    def get_by_category(self, category: str) -> List[Medicine]:
        wanted = category.strip().casefold()
        return self.find(lambda medicine: medicine.category.casefold() == wanted)

    def get_low_stock(self) -> List[Medicine]:
        return self.find(lambda medicine: medicine.is_low_stock())

    def get_expired(self) -> List[Medicine]:
        today = self.clock.today()
        return self.find(lambda medicine: medicine.is_expired(today))

    def get_expiring_soon(self, days: int = 0) -> List[Medicine]:
        days = days or get_business_rules().EXPIRING_SOON_DAYS
        today = self.clock.today()
        return self.find(lambda medicine: medicine.is_expiring_soon(today, days))

    def search_by_name(self, name: str) -> List[Medicine]:
        return self.find(lambda medicine: contains_text(medicine.name, name)
                         or contains_text(medicine.generic_name, name))

    def search(self, query: str) -> List[Medicine]:
        return self.find(lambda medicine: any(
            contains_text(value, query)
            for value in (medicine.medicine_id, medicine.name, medicine.generic_name,
                          medicine.category, medicine.manufacturer)
        ))

    def get_all_categories(self) -> List[str]:
        return sorted({medicine.category for medicine in self.get_all() if medicine.category})

    def get_all_manufacturers(self) -> List[str]:
        return sorted({medicine.manufacturer for medicine in self.get_all() if medicine.manufacturer})

    @synchronized
    def update_stock(self, medicine_id: str, quantity: int) -> bool:
        """Set the absolute stock level"""
        if quantity < 0:
            return False
        index = self._index_of(medicine_id)
        if index < 0:
            self.last_error = StoreError.NOT_FOUND
            return False
        self._items[index].quantity_in_stock = quantity
        return self._save()
