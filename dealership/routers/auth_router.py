from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from dealership.auth import require_gateway
from dealership.db.session import get_db
from dealership.schemas import ApiResponse, UserOut
from dealership.services import users

router = APIRouter()


class CredentialsIn(BaseModel):
    email: str
    password: str


@router.post("/verify", response_model=ApiResponse[UserOut], dependencies=[Depends(require_gateway)])
def verify_credentials(payload: CredentialsIn, db: Session = Depends(get_db)):
    """Called by the identity provider to check a login and read the role to put in the session."""
    user = users.authenticate(db, payload.email, payload.password)
    return {"success": True, "data": user}
