"""
Схемы запросов и ответов HTTP API
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from database.models.booking import BookingStatus
from database.models.car import CarStatus
from database.models.contract import ContractStatus
from database.models.customer import CustomerStatus


# ---- запросы ----

class BookingCreate(BaseModel):
    customer_id: int = Field(..., gt=0)
    car_id: int = Field(..., gt=0)
    start_date: date
    end_date: date
    notes: Optional[str] = Field(None, max_length=500)


class SelfServiceBookingCreate(BaseModel):
    """Клиент бронирует для себя: customer_id берется из учетной записи"""
    car_id: int = Field(..., gt=0)
    start_date: date
    end_date: date
    notes: Optional[str] = Field(None, max_length=500)


class ContractCreate(BaseModel):
    customer_id: int = Field(..., gt=0)
    car_id: int = Field(..., gt=0)
    start_date: date
    end_date: date
    price_per_day: Optional[Decimal] = Field(None, ge=0, description="Defaults to the car's daily rate")
    terms: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=500)


class BookingListQuery(BaseModel):
    search: Optional[str] = None
    status: Optional[BookingStatus] = None


class ContractListQuery(BaseModel):
    search: Optional[str] = None
    status: Optional[ContractStatus] = None


class AvailabilityQuery(BaseModel):
    start_date: date
    end_date: date


# ---- ответы ----

class CarOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    license_plate: str
    brand: str
    model: str
    year: int
    type: str
    seats: int
    fuel_type: str
    price_per_day: Decimal
    status: CarStatus
    description: Optional[str] = None


class CustomerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    phone_number: Optional[str] = None
    email: Optional[str] = None
    identity_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    status: CustomerStatus


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    car_id: int
    start_date: date
    end_date: date
    rental_days: int
    total_price: Decimal
    status: BookingStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ContractOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    car_id: int
    contract_number: str
    start_date: date
    end_date: date
    rental_days: int
    price_per_day: Decimal
    total_price: Decimal
    deposit: Decimal
    terms: Optional[str] = None
    notes: Optional[str] = None
    status: ContractStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    signed_at: Optional[datetime] = None


class CreateDataOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    customers: List[CustomerOut]
    cars: List[CarOut]


class ContractPrintOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    contract: ContractOut
    customer: Optional[CustomerOut] = None
    car: Optional[CarOut] = None
    print_date: datetime
