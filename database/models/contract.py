from sqlalchemy import Column, Integer, String, DateTime, Date, Enum, ForeignKey, Numeric
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from database.base import Base
import enum


class ContractStatus(enum.Enum):
    DRAFT = "draft"             # Черновик
    ACTIVE = "active"           # Действует
    COMPLETED = "completed"     # Завершен
    CANCELLED = "cancelled"     # Расторгнут
    EXPIRED = "expired"         # Истек


TERMINAL_CONTRACT_STATUSES = frozenset({
    ContractStatus.COMPLETED,
    ContractStatus.CANCELLED,
    ContractStatus.EXPIRED,
})


class RentalContract(Base):
    __tablename__ = "rental_contracts"

    id = Column(Integer, primary_key=True, index=True)

    # Связи
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    car_id = Column(Integer, ForeignKey("cars.id"), nullable=False, index=True)

    contract_number = Column(String(20), unique=True, nullable=False, index=True)

    # Период аренды
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    rental_days = Column(Integer, nullable=False)

    # Финансы
    price_per_day = Column(Numeric(18, 2), nullable=False)
    total_price = Column(Numeric(18, 2), nullable=False)
    deposit = Column(Numeric(18, 2), nullable=False, default=0)

    terms = Column(String(500), nullable=True)
    notes = Column(String(500), nullable=True)

    status = Column(Enum(ContractStatus), default=ContractStatus.ACTIVE, nullable=False)

    # Временные метки
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    signed_at = Column(DateTime(timezone=True), nullable=True)

    # Связи
    customer = relationship("Customer", back_populates="contracts")
    car = relationship("Car", back_populates="contracts")

    def __repr__(self):
        return f"<RentalContract(id={self.id}, number={self.contract_number}, status={self.status.value})>"

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_CONTRACT_STATUSES
