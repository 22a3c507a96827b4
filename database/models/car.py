from sqlalchemy import Column, Integer, String, DateTime, Enum, Numeric
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from database.base import Base
import enum


class CarStatus(enum.Enum):
    AVAILABLE = "available"          # Свободна
    RENTED = "rented"                # В аренде
    RESERVED = "reserved"            # Забронирована
    MAINTENANCE = "maintenance"      # На обслуживании
    OUT_OF_SERVICE = "out_of_service"  # Выведена из эксплуатации


class Car(Base):
    __tablename__ = "cars"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    license_plate = Column(String(20), unique=True, nullable=False, index=True)
    brand = Column(String(50), nullable=False)
    model = Column(String(50), nullable=False)
    year = Column(Integer, nullable=False)
    type = Column(String(30), nullable=False)  # Sedan, SUV, Hatchback...
    seats = Column(Integer, nullable=False)
    fuel_type = Column(String(20), nullable=False)
    description = Column(String(500), nullable=True)

    # Статус меняется только сервисами бронирования и договоров
    status = Column(Enum(CarStatus), default=CarStatus.AVAILABLE, nullable=False)

    # Тариф
    price_per_day = Column(Numeric(18, 2), nullable=False, default=0)

    # Оптимистичная блокировка
    version = Column(Integer, nullable=False)

    # Временные метки
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Связи
    bookings = relationship("Booking", back_populates="car")
    contracts = relationship("RentalContract", back_populates="car")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Car(id={self.id}, plate={self.license_plate}, status={self.status.value})>"

    @property
    def is_available(self) -> bool:
        return self.status == CarStatus.AVAILABLE
