"""
Проверка доступности автомобиля на период.
Только чтение: статус автомобиля и пересечения с действующими договорами.
"""
from datetime import date
from typing import List

from sqlalchemy import select, exists, and_
from sqlalchemy.ext.asyncio import AsyncSession

from database.models.car import Car, CarStatus
from database.models.contract import RentalContract, ContractStatus


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Пересечение с включенными границами: касание концов тоже конфликт"""
    return a_start <= b_end and b_start <= a_end


def _active_contract_overlap(car_id, start_date: date, end_date: date):
    return and_(
        RentalContract.car_id == car_id,
        RentalContract.status == ContractStatus.ACTIVE,
        RentalContract.start_date <= end_date,
        RentalContract.end_date >= start_date,
    )


class AvailabilityChecker:
    """Проверка конфликтов бронирования по действующим договорам"""

    async def has_conflict(
        self,
        session: AsyncSession,
        car_id: int,
        start_date: date,
        end_date: date
    ) -> bool:
        """Есть ли действующий договор на этот автомобиль, пересекающийся с периодом"""
        result = await session.execute(
            select(exists().where(_active_contract_overlap(car_id, start_date, end_date)))
        )
        return bool(result.scalar())

    async def is_available(
        self,
        session: AsyncSession,
        car_id: int,
        start_date: date,
        end_date: date
    ) -> bool:
        car = await session.get(Car, car_id)
        if car is None or not car.is_available:
            return False
        return not await self.has_conflict(session, car_id, start_date, end_date)

    async def find_available_cars(
        self,
        session: AsyncSession,
        start_date: date,
        end_date: date
    ) -> List[Car]:
        """Свободные автомобили без пересекающихся действующих договоров"""
        result = await session.execute(
            select(Car)
            .where(
                Car.status == CarStatus.AVAILABLE,
                ~exists().where(_active_contract_overlap(Car.id, start_date, end_date))
            )
            .order_by(Car.created_at.desc(), Car.id.desc())
        )
        return list(result.scalars().all())
