from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dealership.auth import Principal, require_admin
from dealership.db.session import get_db
from dealership.schemas import ApiResponse, KPIData, MonthlySalesData
from dealership.services import analytics

router = APIRouter()


@router.get("/kpi", response_model=ApiResponse[KPIData])
def get_kpi(
    year: int | None = Query(default=None),
    month: int | None = Query(default=None, description="0 = January .. 11 = December"),
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return {"success": True, "data": analytics.compute_kpi(db, year=year, month=month)}

@router.get("/monthly-sales", response_model=ApiResponse[list[MonthlySalesData]])
def get_monthly_sales(
    year: int | None = Query(default=None),
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    # always the full year, whatever month the dashboard is filtered to
    return {"success": True, "data": analytics.compute_monthly_series(db, year=year)}
