"""Medicine inventory management"""
import logging
from typing import List, Optional

from medrecords.database import DataStore
from medrecords.models import Medicine
from medrecords.validators.business_rules import get_business_rules

logger = logging.getLogger(__name__)


class MedicineService:
    def __init__(self, store: DataStore):
        self.store = store

    @property
    def medicines(self):
        return self.store.medicines

    def create_medicine(self, name: str, manufacturer: str = "", unit_price: float = 0.0,
                        quantity: int = 0, reorder_level: Optional[int] = None,
                        **fields) -> Optional[Medicine]:
        """
        Create a medicine with the next MED id.

        Extra keyword fields (generic_name, category, description, expiry_date,
        dosage_form, strength) are passed through to the model. Returns None when the
        fields are invalid or the name/manufacturer pair already exists.
        """
        if reorder_level is None:
            reorder_level = get_business_rules().DEFAULT_REORDER_LEVEL
        with self.medicines.locked():
            try:
                medicine = Medicine(
                    medicine_id=self.medicines.get_next_id(),
                    name=name.strip(),
                    manufacturer=manufacturer.strip(),
                    unit_price=unit_price,
                    quantity_in_stock=quantity,
                    reorder_level=reorder_level,
                    **fields,
                )
            except ValueError as e:
                logger.info(f"Rejected medicine '{name}': {e}")
                return None
            if not self.medicines.add(medicine):
                logger.info(f"Medicine '{name}' by '{manufacturer}' not added: {self.medicines.last_error}")
                return None
        logger.info(f"Added medicine {medicine.medicine_id} ({medicine.name})")
        return medicine

    def update_medicine(self, medicine: Medicine) -> bool:
        return self.medicines.update(medicine)

    def delete_medicine(self, medicine_id: str) -> bool:
        return self.medicines.remove(medicine_id)

    def get_medicine(self, medicine_id: str) -> Optional[Medicine]:
        return self.medicines.get_by_id(medicine_id)

    # ------------------------------------------------------------------
    # Stock
    # ------------------------------------------------------------------

    def add_stock(self, medicine_id: str, quantity: int) -> bool:
        if quantity <= 0:
            return False
        with self.medicines.locked():
            medicine = self.medicines.get_by_id(medicine_id)
            if medicine is None:
                return False
            return self.medicines.update_stock(medicine_id, medicine.quantity_in_stock + quantity)

    def remove_stock(self, medicine_id: str, quantity: int) -> bool:
        if quantity <= 0:
            return False
        with self.medicines.locked():
            medicine = self.medicines.get_by_id(medicine_id)
            if medicine is None or medicine.quantity_in_stock < quantity:
                return False
            return self.medicines.update_stock(medicine_id, medicine.quantity_in_stock - quantity)

    def has_enough_stock(self, medicine_id: str, quantity: int) -> bool:
        medicine = self.medicines.get_by_id(medicine_id)
        return medicine is not None and medicine.quantity_in_stock >= quantity

    def get_stock_level(self, medicine_id: str) -> int:
        """Current stock, or -1 for an unknown medicine"""
        medicine = self.medicines.get_by_id(medicine_id)
        return medicine.quantity_in_stock if medicine is not None else -1

    def update_reorder_level(self, medicine_id: str, reorder_level: int) -> bool:
        if reorder_level < 0:
            return False
        with self.medicines.locked():
            medicine = self.medicines.get_by_id(medicine_id)
            if medicine is None:
                return False
            medicine.reorder_level = reorder_level
            return self.medicines.update(medicine)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(self, query: str) -> List[Medicine]:
        return self.medicines.search(query)

    def get_by_category(self, category: str) -> List[Medicine]:
        return self.medicines.get_by_category(category)

    def get_low_stock_alerts(self) -> List[Medicine]:
        return self.medicines.get_low_stock()

    def get_expired(self) -> List[Medicine]:
        return self.medicines.get_expired()

    def get_expiring_soon(self, days: int = 0) -> List[Medicine]:
        return self.medicines.get_expiring_soon(days)

    def get_inventory_value(self) -> float:
        return sum(m.unit_price * m.quantity_in_stock for m in self.medicines.get_all())
