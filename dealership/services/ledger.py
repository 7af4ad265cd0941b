import logging
from datetime import datetime

from sqlalchemy import select, delete, update
from sqlalchemy.orm import Session

from dealership.db.models import Bike, BikeStatus, Sale, utcnow
from dealership.db.session import atomic
from dealership.errors import NotFound
from dealership.validation import require_month, require_year

logger = logging.getLogger(__name__)


def sale_window(year: int, month: int | None = None) -> tuple[datetime, datetime]:
    """Half-open [start, end) range of sale dates for a year or a 0-based month."""
    require_year(year)
    if month is None:
        return datetime(year, 1, 1), datetime(year + 1, 1, 1)
    require_month(month)
    start = datetime(year, month + 1, 1)
    end = datetime(year + 1, 1, 1) if month == 11 else datetime(year, month + 2, 1)
    return start, end


def list_sales(db: Session, year: int | None = None, month: int | None = None) -> list[Sale]:
    stmt = select(Sale)
    if year is not None:
        start, end = sale_window(year, month)
        stmt = stmt.where(Sale.sale_date >= start, Sale.sale_date < end)
    elif month is not None:
        start, end = sale_window(utcnow().year, month)
        stmt = stmt.where(Sale.sale_date >= start, Sale.sale_date < end)
    stmt = stmt.order_by(Sale.sale_date.desc(), Sale.id.desc())
    return list(db.execute(stmt).scalars())


def get_sale(db: Session, sale_id: int) -> Sale:
    sale = db.get(Sale, sale_id)
    if sale is None:
        raise NotFound(f"Sale {sale_id} not found")
    return sale


def get_sale_by_bike_id(db: Session, bike_id: int) -> Sale:
    sale = db.execute(select(Sale).where(Sale.bike_id == bike_id)).scalar_one_or_none()
    if sale is None:
        raise NotFound(f"No sale recorded for bike {bike_id}")
    return sale


def clear_all(db: Session) -> dict:
    """Erase the whole ledger and put every sold bike back on sale, atomically."""
    with atomic(db):
        sales_deleted = db.execute(
            delete(Sale).execution_options(synchronize_session=False)
        ).rowcount
        bikes_reset = db.execute(
            update(Bike)
            .where(Bike.status == BikeStatus.SOLD.value)
            .values(status=BikeStatus.AVAILABLE.value, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        ).rowcount
    logger.info("ledger cleared: %s sales deleted, %s bikes reset", sales_deleted, bikes_reset)
    return {"sales_deleted": sales_deleted, "bikes_reset": bikes_reset}
