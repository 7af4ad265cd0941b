from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from dealership.auth import Principal, require_admin
from dealership.db.session import get_db
from dealership.schemas import ApiResponse, UserCreate, UserOut, UserUpdate
from dealership.services import users

router = APIRouter()


@router.get("", response_model=ApiResponse[list[UserOut]])
def list_users(_: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    return {"success": True, "data": users.list_users(db)}

@router.get("/{user_id}", response_model=ApiResponse[UserOut])
def get_user(user_id: int, _: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    return {"success": True, "data": users.get_user(db, user_id)}

@router.post("", response_model=ApiResponse[UserOut], status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, _: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    user = users.create_user(db, payload.email, payload.password, payload.role, payload.display_name)
    return {"success": True, "data": user, "message": "User created"}

@router.put("/{user_id}", response_model=ApiResponse[UserOut])
def update_user(
    user_id: int,
    payload: UserUpdate,
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = users.update_user(db, user_id, payload.model_dump(exclude_unset=True))
    return {"success": True, "data": user, "message": "User updated"}

@router.delete("/{user_id}", response_model=ApiResponse[None])
def delete_user(user_id: int, _: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    users.delete_user(db, user_id)
    return {"success": True, "message": "User deleted"}
