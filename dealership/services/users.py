import logging

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash, check_password_hash

from dealership.db.models import User, UserRole
from dealership.db.session import atomic
from dealership.errors import InvalidState, NotFound, Unauthorized, ValidationError
from dealership.validation import require_text

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _require_password(password) -> str:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
        )
    return password


def _require_role(role) -> str:
    try:
        return UserRole(role).value
    except ValueError:
        raise ValidationError("role must be admin or worker", field="role") from None


def _admin_count(db: Session) -> int:
    return db.execute(
        select(func.count()).select_from(User).where(User.role == UserRole.ADMIN.value)
    ).scalar_one()


def _guard_last_admin(db: Session, user: User, action: str) -> None:
    if user.role == UserRole.ADMIN.value and _admin_count(db) <= 1:
        logger.warning("refused to %s user %s: last admin", action, user.id)
        raise InvalidState(f"Cannot {action} the last admin account")


def authenticate(db: Session, email: str, password: str) -> User:
    """Credential check used by the upstream identity provider."""
    user = db.execute(
        select(User).where(func.lower(User.email) == (email or "").strip().lower())
    ).scalar_one_or_none()
    if user is None or not check_password_hash(user.password_hash, password or ""):
        raise Unauthorized("Invalid credentials.", status_code=401)
    return user


def create_user(db: Session, email: str, password: str, role: UserRole | str, display_name: str) -> User:
    email = require_text(email, "email").lower()
    user = User(
        email=email,
        password_hash=generate_password_hash(_require_password(password)),
        role=_require_role(role),
        display_name=require_text(display_name, "displayName"),
    )
    exists = db.execute(select(User.id).where(func.lower(User.email) == email)).first()
    if exists:
        raise ValidationError(f"{email} is already registered", field="email")
    try:
        with atomic(db):
            db.add(user)
    except IntegrityError as e:
        raise ValidationError(f"{email} is already registered", field="email") from e
    db.refresh(user)
    logger.info("user %s created with role %s", user.id, user.role)
    return user


def list_users(db: Session) -> list[User]:
    return list(db.execute(select(User).order_by(User.created_at, User.id)).scalars())


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found")
    return user


def update_user(db: Session, user_id: int, changes: dict) -> User:
    user = get_user(db, user_id)
    role = changes.get("role")
    if role is not None and _require_role(role) != user.role:
        if user.role == UserRole.ADMIN.value:
            _guard_last_admin(db, user, "demote")

    email = changes.get("email")
    if email is not None:
        email = require_text(email, "email").lower()
        taken = db.execute(
            select(User.id).where(func.lower(User.email) == email, User.id != user.id)
        ).first()
        if taken:
            raise ValidationError(f"{email} is already registered", field="email")

    try:
        with atomic(db):
            if email is not None:
                user.email = email
            if changes.get("display_name") is not None:
                user.display_name = require_text(changes["display_name"], "displayName")
            if role is not None:
                user.role = _require_role(role)
            if changes.get("password") is not None:
                user.password_hash = generate_password_hash(_require_password(changes["password"]))
    except IntegrityError as e:
        raise ValidationError(f"{email} is already registered", field="email") from e
    db.refresh(user)
    logger.info("user %s updated", user.id)
    return user


def delete_user(db: Session, user_id: int) -> None:
    user = get_user(db, user_id)
    _guard_last_admin(db, user, "delete")
    with atomic(db):
        db.delete(user)
    logger.info("user %s deleted", user_id)


def ensure_bootstrap_admin(db: Session, email: str | None, password: str | None,
                           display_name: str = "Administrator") -> User | None:
    """Create the first admin from configuration when no admin exists yet."""
    if not email or not password or _admin_count(db) > 0:
        return None
    admin = create_user(db, email, password, UserRole.ADMIN, display_name)
    logger.info("bootstrap admin %s created", admin.email)
    return admin
