import enum
from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, Integer, Float, DateTime, Text, UniqueConstraint


def utcnow() -> datetime:
    # stored naive, always UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BikeStatus(str, enum.Enum):
    AVAILABLE = "available"
    SOLD = "sold"


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    WORKER = "worker"


class Base(DeclarativeBase):
    pass

class Bike(Base):
    __tablename__ = "bikes"
    # ids are never reused, a surviving sale must not point at a newer bike
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    bike_name: Mapped[str] = mapped_column(String(200))
    year: Mapped[int] = mapped_column(Integer)
    registration_number: Mapped[str] = mapped_column(String(32), index=True)
    owner_phone: Mapped[str] = mapped_column(String(20))
    owner_aadhar: Mapped[str] = mapped_column(String(12))
    owner_address: Mapped[str] = mapped_column(Text)
    purchase_price: Mapped[float] = mapped_column(Float)
    selling_price: Mapped[float] = mapped_column(Float)
    status: Mapped[str] = mapped_column(String(16), index=True, default=BikeStatus.AVAILABLE.value)
    added_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

class Sale(Base):
    __tablename__ = "sales"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # lookup only: no foreign key so deleting a bike never touches its sale
    bike_id: Mapped[int] = mapped_column(Integer)
    # snapshot of the bike at sale time
    bike_name: Mapped[str] = mapped_column(String(200))
    bike_year: Mapped[int] = mapped_column(Integer)
    purchase_price: Mapped[float] = mapped_column(Float)
    sale_price: Mapped[float] = mapped_column(Float)
    profit: Mapped[float] = mapped_column(Float)
    customer_name: Mapped[str] = mapped_column(String(200))
    customer_email: Mapped[str] = mapped_column(String(254))
    customer_phone: Mapped[str] = mapped_column(String(20))
    customer_aadhar: Mapped[str] = mapped_column(String(12))
    customer_address: Mapped[str] = mapped_column(Text)
    sold_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sale_date: Mapped[datetime] = mapped_column(DateTime, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    __table_args__ = (
        UniqueConstraint("bike_id", name="uq_sales_bike_id"),
    )

class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(254), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(256))
    role: Mapped[str] = mapped_column(String(16), default=UserRole.WORKER.value)
    display_name: Mapped[str] = mapped_column(String(120))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)
