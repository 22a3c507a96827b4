from sqlalchemy import Column, Integer, Boolean, DateTime, Date, Enum, ForeignKey, Numeric, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from database.base import Base
import enum


class BookingStatus(enum.Enum):
    PENDING = "pending"         # Ожидает подтверждения
    CONFIRMED = "confirmed"     # Подтверждена, договор создан
    CANCELLED = "cancelled"     # Отменена
    COMPLETED = "completed"     # Завершена
    EXPIRED = "expired"         # Истекла


# Допустимые переходы; терминальные статусы переходов не имеют
BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingStatus.EXPIRED},
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.EXPIRED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
    BookingStatus.EXPIRED: set(),
}


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    # Связи
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    car_id = Column(Integer, ForeignKey("cars.id"), nullable=False, index=True)

    # Период аренды
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    rental_days = Column(Integer, nullable=False)

    # Финансы
    total_price = Column(Numeric(18, 2), nullable=False)

    status = Column(Enum(BookingStatus), default=BookingStatus.PENDING, nullable=False)
    notes = Column(String(500), nullable=True)

    # Бронь сотрудника переводит автомобиль в RESERVED
    reserves_car = Column(Boolean, default=False, nullable=False)

    # Временные метки
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Связи
    customer = relationship("Customer", back_populates="bookings")
    car = relationship("Car", back_populates="bookings")

    def __repr__(self):
        return f"<Booking(id={self.id}, customer_id={self.customer_id}, car_id={self.car_id}, status={self.status.value})>"

    def can_transition_to(self, status: BookingStatus) -> bool:
        return status in BOOKING_TRANSITIONS[self.status]
