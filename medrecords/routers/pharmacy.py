"""Medicine inventory endpoints"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional

from medrecords.database import DataStore, get_store
from medrecords.dependencies import get_current_account, get_medicine_service, require_admin
from medrecords.models import Account, Medicine
from medrecords.schemas import MedicineCreate, StockAdjust
from medrecords.services import MedicineService

router = APIRouter(prefix="/api/pharmacy", tags=["Pharmacy"])


@router.get("/medicines", response_model=List[Medicine])
def list_medicines(
    q: Optional[str] = None,
    category: Optional[str] = None,
    current_account: Account = Depends(get_current_account),
    store: DataStore = Depends(get_store)
):
    if q:
        return store.medicines.search(q)
    if category:
        return store.medicines.get_by_category(category)
    return store.medicines.get_all()


@router.get("/medicines/low-stock", response_model=List[Medicine])
def low_stock(
    current_account: Account = Depends(require_admin),
    medicines: MedicineService = Depends(get_medicine_service)
):
    """Medicines at or below their reorder level"""
    return medicines.get_low_stock_alerts()


@router.get("/medicines/expiring", response_model=List[Medicine])
def expiring(
    days: int = 0,
    current_account: Account = Depends(require_admin),
    medicines: MedicineService = Depends(get_medicine_service)
):
    return medicines.get_expiring_soon(days)


@router.get("/medicines/expired", response_model=List[Medicine])
def expired(
    current_account: Account = Depends(require_admin),
    medicines: MedicineService = Depends(get_medicine_service)
):
    return medicines.get_expired()


@router.get("/medicines/{medicine_id}", response_model=Medicine)
def get_medicine(
    medicine_id: str,
    current_account: Account = Depends(get_current_account),
    medicines: MedicineService = Depends(get_medicine_service)
):
    medicine = medicines.get_medicine(medicine_id)
    if not medicine:
        raise HTTPException(status_code=404, detail="Medicine not found")
    return medicine


@router.post("/medicines", response_model=Medicine, status_code=status.HTTP_201_CREATED)
def create_medicine(
    data: MedicineCreate,
    current_account: Account = Depends(require_admin),
    medicines: MedicineService = Depends(get_medicine_service)
):
    fields = data.model_dump(exclude={"name", "manufacturer", "unit_price", "quantity", "reorder_level"})
    medicine = medicines.create_medicine(data.name, data.manufacturer, data.unit_price, data.quantity,
                                         data.reorder_level, **fields)
    if not medicine:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Medicine is invalid or already exists for this manufacturer"
        )
    return medicine


@router.post("/medicines/{medicine_id}/stock", response_model=Medicine)
def adjust_stock(
    medicine_id: str,
    data: StockAdjust,
    current_account: Account = Depends(require_admin),
    medicines: MedicineService = Depends(get_medicine_service)
):
    if medicines.get_medicine(medicine_id) is None:
        raise HTTPException(status_code=404, detail="Medicine not found")
    ok = True
    if data.change > 0:
        ok = medicines.add_stock(medicine_id, data.change)
    elif data.change < 0:
        ok = medicines.remove_stock(medicine_id, -data.change)
    if not ok:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Stock cannot go below zero"
        )
    return medicines.get_medicine(medicine_id)
