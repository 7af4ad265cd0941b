from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from dealership.auth import Principal, require_staff
from dealership.db.models import BikeStatus
from dealership.db.session import get_db
from dealership.schemas import ApiResponse, BikeCreate, BikeOut, BikeUpdate
from dealership.services import inventory

router = APIRouter()


@router.post("", response_model=ApiResponse[BikeOut], status_code=status.HTTP_201_CREATED)
def create_bike(
    payload: BikeCreate,
    principal: Principal = Depends(require_staff),
    db: Session = Depends(get_db),
):
    bike = inventory.create_bike(db, payload.model_dump(), principal)
    return {"success": True, "data": bike, "message": "Bike added"}

@router.get("", response_model=ApiResponse[list[BikeOut]])
def list_bikes(
    status: BikeStatus | None = Query(default=None),
    q: str | None = Query(default=None, max_length=100),
    _: Principal = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return {"success": True, "data": inventory.list_bikes(db, status=status, q=q)}

@router.get("/{bike_id}", response_model=ApiResponse[BikeOut])
def get_bike(bike_id: int, _: Principal = Depends(require_staff), db: Session = Depends(get_db)):
    return {"success": True, "data": inventory.get_bike(db, bike_id)}

@router.put("/{bike_id}", response_model=ApiResponse[BikeOut])
def update_bike(
    bike_id: int,
    payload: BikeUpdate,
    _: Principal = Depends(require_staff),
    db: Session = Depends(get_db),
):
    bike = inventory.update_bike(db, bike_id, payload.model_dump(exclude_unset=True))
    return {"success": True, "data": bike, "message": "Bike updated"}

@router.delete("/{bike_id}", response_model=ApiResponse[None])
def delete_bike(bike_id: int, _: Principal = Depends(require_staff), db: Session = Depends(get_db)):
    inventory.delete_bike(db, bike_id)
    return {"success": True, "message": "Bike deleted"}
