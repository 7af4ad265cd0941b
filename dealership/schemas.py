from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel

from dealership.db.models import BikeStatus, UserRole

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    error: Optional[str] = None


# --- bikes ---

class BikeCreate(CamelModel):
    bike_name: str
    year: int
    registration_number: str
    owner_phone: str
    owner_aadhar: str
    owner_address: str
    purchase_price: float
    selling_price: float

class BikeUpdate(CamelModel):
    bike_name: Optional[str] = None
    year: Optional[int] = None
    registration_number: Optional[str] = None
    owner_phone: Optional[str] = None
    owner_aadhar: Optional[str] = None
    owner_address: Optional[str] = None
    purchase_price: Optional[float] = None
    selling_price: Optional[float] = None
    status: Optional[BikeStatus] = None

class BikeOut(CamelModel):
    id: int
    bike_name: str
    year: int
    registration_number: str
    owner_phone: str
    owner_aadhar: str
    owner_address: str
    purchase_price: float
    selling_price: float
    status: BikeStatus
    added_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime


# --- sales ---

class SaleCreate(CamelModel):
    sale_price: float
    customer_name: str
    customer_email: EmailStr
    customer_phone: str
    customer_aadhar: str
    customer_address: str

class SaleOut(CamelModel):
    id: int
    bike_id: int
    bike_name: str
    bike_year: int
    purchase_price: float
    sale_price: float
    profit: float
    customer_name: str
    customer_email: str
    customer_phone: str
    customer_aadhar: str
    customer_address: str
    sold_by: Optional[int] = None
    sale_date: datetime
    created_at: datetime

class ClearAllResult(CamelModel):
    sales_deleted: int
    bikes_reset: int


# --- analytics ---

class KPIData(CamelModel):
    total_profit: float = 0.0
    total_revenue: float = 0.0
    total_expenses: float = 0.0
    total_bikes_sold: int = 0
    total_bikes_available: int = 0

class MonthlySalesData(CamelModel):
    month: str
    sales: float = 0.0
    purchases: float = 0.0
    profit: float = 0.0


# --- users ---

class UserCreate(CamelModel):
    email: EmailStr
    password: str
    role: UserRole = UserRole.WORKER
    display_name: str

class UserUpdate(CamelModel):
    email: Optional[EmailStr] = None
    display_name: Optional[str] = None
    role: Optional[UserRole] = None
    password: Optional[str] = None

class UserOut(CamelModel):
    id: int
    email: str
    role: UserRole
    display_name: str
    created_at: datetime
    updated_at: Optional[datetime] = None
