"""
Нумерация договоров аренды: HD + год + месяц + порядковый номер.
"""
from datetime import datetime

from loguru import logger
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from database.models.contract import RentalContract
from database.models.counter import Counter


CONTRACT_COUNTER = "contract_number"


def format_contract_number(year: int, month: int, sequence: int, prefix: str = None) -> str:
    prefix = settings.contract_number_prefix if prefix is None else prefix
    return f"{prefix}{year:04d}{month:02d}{sequence:04d}"


async def next_contract_number(session: AsyncSession, now: datetime) -> str:
    """
    Выдать следующий номер договора.

    Счетчик блокируется до конца транзакции вызывающего кода, поэтому
    параллельные подтверждения не получат одинаковый номер. При первом
    обращении счетчик инициализируется текущим количеством договоров.
    """
    result = await session.execute(
        select(Counter).where(Counter.name == CONTRACT_COUNTER).with_for_update()
    )
    counter = result.scalar_one_or_none()

    if counter is None:
        total = await session.scalar(select(func.count(RentalContract.id)))
        counter = Counter(name=CONTRACT_COUNTER, value=total or 0)
        session.add(counter)
        logger.info(f"🔢 Счетчик договоров инициализирован значением {counter.value}")

    counter.value += 1
    await session.flush()

    return format_contract_number(now.year, now.month, counter.value)
