from datetime import date
from typing import Optional

from sqlalchemy import Column, Integer, String, DateTime, Date, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from database.base import Base
import enum


class Gender(enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class CustomerStatus(enum.Enum):
    ACTIVE = "active"            # Активен
    INACTIVE = "inactive"        # Неактивен
    BLACKLISTED = "blacklisted"  # Запрещена аренда


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(100), nullable=False)
    phone_number = Column(String(15), nullable=True)
    email = Column(String(100), unique=True, nullable=True)
    identity_number = Column(String(20), unique=True, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(Enum(Gender), nullable=True)
    address = Column(String(200), nullable=True)
    occupation = Column(String(50), nullable=True)
    workplace = Column(String(200), nullable=True)

    status = Column(Enum(CustomerStatus), default=CustomerStatus.ACTIVE, nullable=False)

    # Временные метки
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Связи
    bookings = relationship("Booking", back_populates="customer")
    contracts = relationship("RentalContract", back_populates="customer")

    def __repr__(self):
        return f"<Customer(id={self.id}, name={self.full_name}, status={self.status.value})>"

    @property
    def is_active(self) -> bool:
        return self.status == CustomerStatus.ACTIVE

    def has_complete_profile(self, today: Optional[date] = None) -> bool:
        """Заполнен ли профиль настолько, чтобы клиент мог бронировать"""
        today = today or date.today()
        required = (
            self.full_name, self.phone_number, self.email,
            self.identity_number, self.address
        )
        if any(not (value or "").strip() for value in required):
            return False
        return self.date_of_birth is not None and self.date_of_birth < today
