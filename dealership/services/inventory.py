import logging

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from dealership.auth import Principal
from dealership.db.models import Bike, BikeStatus
from dealership.db.session import atomic, settings
from dealership.errors import InvalidState, NotFound, ValidationError
from dealership.validation import clean_bike

logger = logging.getLogger(__name__)

BIKE_FIELDS = (
    "bike_name", "year", "registration_number", "owner_phone", "owner_aadhar",
    "owner_address", "purchase_price", "selling_price",
)


def registration_taken(db: Session, registration_number: str, exclude_id: int | None = None) -> bool:
    stmt = select(func.count()).select_from(Bike).where(
        func.upper(Bike.registration_number) == registration_number.upper()
    )
    if exclude_id is not None:
        stmt = stmt.where(Bike.id != exclude_id)
    return db.execute(stmt).scalar_one() > 0


def check_registration(db: Session, registration_number: str, exclude_id: int | None = None) -> None:
    if not registration_taken(db, registration_number, exclude_id):
        return
    if settings.ENFORCE_UNIQUE_REGISTRATION:
        raise ValidationError(
            f"registrationNumber {registration_number} is already registered", field="registrationNumber"
        )
    logger.warning("duplicate registration number %s accepted", registration_number)


def create_bike(db: Session, draft: dict, principal: Principal) -> Bike:
    fields = clean_bike({k: draft.get(k) for k in BIKE_FIELDS})
    check_registration(db, fields["registration_number"])
    bike = Bike(**fields, status=BikeStatus.AVAILABLE.value, added_by=principal.user_id)
    with atomic(db):
        db.add(bike)
    db.refresh(bike)
    logger.info("bike %s (%s) added by user %s", bike.id, bike.registration_number, principal.user_id)
    return bike


def list_bikes(db: Session, status: BikeStatus | str | None = None, q: str | None = None) -> list[Bike]:
    stmt = select(Bike)
    if status:
        stmt = stmt.where(Bike.status == BikeStatus(status).value)
    if q and q.strip():
        pattern = f"%{q.strip().lower()}%"
        stmt = stmt.where(or_(
            func.lower(Bike.bike_name).like(pattern),
            func.lower(Bike.registration_number).like(pattern),
        ))
    stmt = stmt.order_by(Bike.created_at.desc(), Bike.id.desc())
    return list(db.execute(stmt).scalars())


def get_bike(db: Session, bike_id: int) -> Bike:
    bike = db.get(Bike, bike_id)
    if bike is None:
        raise NotFound(f"Bike {bike_id} not found")
    return bike


def update_bike(db: Session, bike_id: int, changes: dict) -> Bike:
    """Apply a partial update.

    ``status`` is not writable here: a value equal to the current status is
    ignored, anything else is rejected. Selling goes through the lifecycle
    service and a sold bike never reverts.
    """
    bike = get_bike(db, bike_id)
    status = changes.get("status")
    if status is not None and BikeStatus(status).value != bike.status:
        raise InvalidState(
            f"Bike {bike_id} status cannot be changed to {BikeStatus(status).value} by an update"
        )

    merged = {k: getattr(bike, k) for k in BIKE_FIELDS}
    merged.update({k: v for k, v in changes.items() if k in BIKE_FIELDS})
    fields = clean_bike(merged)
    if fields["registration_number"].upper() != bike.registration_number.upper():
        check_registration(db, fields["registration_number"], exclude_id=bike.id)

    with atomic(db):
        for key, value in fields.items():
            setattr(bike, key, value)
    db.refresh(bike)
    logger.info("bike %s updated", bike.id)
    return bike


def delete_bike(db: Session, bike_id: int) -> None:
    bike = get_bike(db, bike_id)
    with atomic(db):
        db.delete(bike)
    logger.info("bike %s deleted (status was %s)", bike_id, bike.status)


def count_available(db: Session) -> int:
    return db.execute(
        select(func.count()).select_from(Bike).where(Bike.status == BikeStatus.AVAILABLE.value)
    ).scalar_one()
