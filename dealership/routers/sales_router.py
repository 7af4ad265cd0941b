from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from dealership.auth import Principal, require_admin, require_staff
from dealership.db.session import get_db
from dealership.schemas import ApiResponse, ClearAllResult, SaleCreate, SaleOut
from dealership.services import ledger, lifecycle

router = APIRouter()


@router.post("/bike/{bike_id}/sold", response_model=ApiResponse[SaleOut], status_code=status.HTTP_201_CREATED)
def mark_bike_sold(
    bike_id: int,
    payload: SaleCreate,
    principal: Principal = Depends(require_staff),
    db: Session = Depends(get_db),
):
    sale = lifecycle.sell(db, bike_id, payload.model_dump(), principal)
    return {"success": True, "data": sale, "message": "Bike marked as sold"}

@router.get("", response_model=ApiResponse[list[SaleOut]])
def list_sales(
    year: int | None = Query(default=None),
    month: int | None = Query(default=None, description="0 = January .. 11 = December"),
    _: Principal = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return {"success": True, "data": ledger.list_sales(db, year=year, month=month)}

@router.delete("/clear-all", response_model=ApiResponse[ClearAllResult])
def clear_all(_: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    result = ledger.clear_all(db)
    return {"success": True, "data": result, "message": "All sales cleared"}

@router.get("/bike/{bike_id}", response_model=ApiResponse[SaleOut])
def get_sale_by_bike(bike_id: int, _: Principal = Depends(require_staff), db: Session = Depends(get_db)):
    return {"success": True, "data": ledger.get_sale_by_bike_id(db, bike_id)}

@router.get("/{sale_id}", response_model=ApiResponse[SaleOut])
def get_sale(sale_id: int, _: Principal = Depends(require_staff), db: Session = Depends(get_db)):
    return {"success": True, "data": ledger.get_sale(db, sale_id)}
