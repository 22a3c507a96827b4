"""
Общая основа сервисов жизненного цикла аренды.

Каждая изменяющая операция выполняется в одной транзакции: бронь, договор,
статус автомобиля и запись журнала фиксируются вместе или не фиксируются вовсе.
"""
from contextlib import asynccontextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from config.settings import settings
from database.base import async_session_factory
from database.models.car import Car, CarStatus
from database.models.contract import RentalContract, ContractStatus
from services.availability import AvailabilityChecker
from services.contract_numbers import next_contract_number
from services.errors import RentalError, NotFoundError, RetryableError
from services.pricing import PricingCalculator


class LifecycleService:
    """Базовый класс: сессии, часы, калькулятор и проверка доступности"""

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker] = None,
        clock: Optional[Callable[[], datetime]] = None,
        pricing: Optional[PricingCalculator] = None,
        availability: Optional[AvailabilityChecker] = None
    ):
        self.session_factory = session_factory or async_session_factory
        self.clock = clock or datetime.now
        self.pricing = pricing or PricingCalculator()
        self.availability = availability or AvailabilityChecker()

    def now(self) -> datetime:
        return self.clock()

    def today(self) -> date:
        return self.clock().date()

    @asynccontextmanager
    async def transaction(self, action: str):
        """Сессия в транзакции; при ошибке откатываются все изменения операции"""
        async with self.session_factory() as session:
            try:
                async with session.begin():
                    yield session
            except RentalError as e:
                logger.warning(f"⚠️ {action} отклонено: {e.message}")
                raise
            except (IntegrityError, StaleDataError) as e:
                logger.error(f"❌ {action}: конфликт параллельной записи: {e}")
                raise RetryableError(f"Concurrent update conflict during {action}, please retry") from e

    @asynccontextmanager
    async def read_session(self):
        async with self.session_factory() as session:
            yield session

    @staticmethod
    async def _get_or_404(
        session: AsyncSession,
        model,
        entity_id: int,
        label: str,
        lock: bool = False
    ):
        stmt = select(model).where(model.id == entity_id)
        if lock:
            stmt = stmt.with_for_update()
        entity = (await session.execute(stmt)).scalar_one_or_none()
        if entity is None:
            raise NotFoundError(f"{label} {entity_id} not found")
        return entity

    @staticmethod
    async def _lock_car(session: AsyncSession, car_id: int) -> Optional[Car]:
        result = await session.execute(
            select(Car).where(Car.id == car_id).with_for_update()
        )
        return result.scalar_one_or_none()

    def _set_car_status(self, car: Car, status: CarStatus):
        old_status = car.status
        car.status = status
        car.updated_at = self.now()
        logger.info(f"🚗 Автомобиль {car.id}: {old_status.value} → {status.value}")

    async def _open_contract(
        self,
        session: AsyncSession,
        *,
        customer_id: int,
        car: Car,
        start_date: date,
        end_date: date,
        rental_days: int,
        price_per_day: Decimal,
        total_price: Decimal,
        terms: Optional[str],
        notes: Optional[str]
    ) -> RentalContract:
        """Создать действующий договор и перевести автомобиль в аренду"""
        now = self.now()
        contract = RentalContract(
            customer_id=customer_id,
            car_id=car.id,
            contract_number=await next_contract_number(session, now),
            start_date=start_date,
            end_date=end_date,
            rental_days=rental_days,
            price_per_day=price_per_day,
            total_price=total_price,
            deposit=self.pricing.compute_deposit(total_price),
            terms=terms if terms is not None else settings.default_contract_terms,
            notes=notes,
            status=ContractStatus.ACTIVE,
            created_at=now,
            updated_at=None,
            signed_at=None
        )
        session.add(contract)
        self._set_car_status(car, CarStatus.RENTED)
        await session.flush()  # Получаем contract.id
        return contract
