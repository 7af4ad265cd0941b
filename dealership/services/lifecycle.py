"""Sell transition: the only path from an available bike to a sold one.

The status flip and the sale insert share one transaction. The flip is a
conditional update (``WHERE status = 'available'``) so concurrent attempts on
the same bike serialize in the database: one claims the row, the others see
zero affected rows and are rejected. The unique constraint on
``sales.bike_id`` backs this up at the storage level.
"""
import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dealership.auth import Principal
from dealership.db.models import Bike, BikeStatus, Sale, utcnow
from dealership.db.session import atomic
from dealership.errors import InvalidState, NotFound
from dealership.validation import CUSTOMER_TEXT_FIELDS, clean_sale_input

logger = logging.getLogger(__name__)


def sell(db: Session, bike_id: int, sale_input: dict, principal: Principal,
         sold_at: datetime | None = None) -> Sale:
    fields = clean_sale_input(
        {k: sale_input.get(k) for k in ("sale_price", *CUSTOMER_TEXT_FIELDS)}
    )
    sold_at = sold_at or utcnow()

    try:
        with atomic(db):
            claimed = db.execute(
                update(Bike)
                .where(Bike.id == bike_id, Bike.status == BikeStatus.AVAILABLE.value)
                .values(status=BikeStatus.SOLD.value, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            if claimed.rowcount == 0:
                if db.get(Bike, bike_id) is None:
                    raise NotFound(f"Bike {bike_id} not found")
                raise InvalidState(f"Bike {bike_id} is already sold")

            bike = db.execute(
                select(Bike).where(Bike.id == bike_id).execution_options(populate_existing=True)
            ).scalar_one()
            sale = Sale(
                bike_id=bike.id,
                bike_name=bike.bike_name,
                bike_year=bike.year,
                purchase_price=bike.purchase_price,
                sale_price=fields["sale_price"],
                profit=fields["sale_price"] - bike.purchase_price,
                customer_name=fields["customer_name"],
                customer_email=fields["customer_email"],
                customer_phone=fields["customer_phone"],
                customer_aadhar=fields["customer_aadhar"],
                customer_address=fields["customer_address"],
                sold_by=principal.user_id,
                sale_date=sold_at,
                created_at=utcnow(),
            )
            db.add(sale)
    except InvalidState:
        logger.warning("rejected sell of bike %s: already sold", bike_id)
        raise
    except IntegrityError as e:
        logger.warning("rejected sell of bike %s: sale already recorded", bike_id)
        raise InvalidState(f"Bike {bike_id} is already sold") from e

    db.refresh(sale)
    logger.info("bike %s sold by user %s, sale %s, profit %.2f", bike_id, principal.user_id, sale.id, sale.profit)
    return sale
