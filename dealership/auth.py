"""Authorization boundary.

Credentials are verified upstream by the identity provider, which forwards the
authenticated subject in ``X-User-Id``. The role is looked up from the users
table for that subject; a role claimed by the client is never trusted.
"""
import hmac
from dataclasses import dataclass

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from dealership.db.models import User, UserRole
from dealership.db.session import get_db, settings
from dealership.errors import Unauthorized


@dataclass(frozen=True)
class Principal:
    user_id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def resolve_principal(db: Session, user_id: str | int | None) -> Principal:
    if user_id is None or str(user_id).strip() == "":
        raise Unauthorized("Authentication required", status_code=401)
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise Unauthorized("Malformed user id", status_code=401) from None
    if not 0 < user_id < 2**63:
        raise Unauthorized("Unknown user", status_code=401)
    user = db.get(User, user_id)
    if user is None:
        raise Unauthorized("Unknown user", status_code=401)
    return Principal(user_id=user.id, role=UserRole(user.role))


def require_gateway(x_gateway_key: str | None = Header(default=None)) -> None:
    # no configured key refuses every request
    expected = settings.GATEWAY_API_KEY
    if not expected or not hmac.compare_digest(x_gateway_key or "", expected):
        raise Unauthorized("Invalid gateway key", status_code=401)


def get_principal(
    _: None = Depends(require_gateway),
    x_user_id: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> Principal:
    return resolve_principal(db, x_user_id)


def require_role(*roles: UserRole):
    allowed = set(roles)

    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in allowed:
            raise Unauthorized("Access denied for this role.")
        return principal

    return dependency


require_staff = require_role(UserRole.ADMIN, UserRole.WORKER)
require_admin = require_role(UserRole.ADMIN)
