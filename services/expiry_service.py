"""
Истечение просроченных броней.
Внешний по отношению к сервисам жизненного цикла планировщик: сервисы сами
ничего не опрашивают, этот модуль лишь вызывает expire_booking по расписанию.
"""
import asyncio

from loguru import logger

from services.audit_service import SYSTEM_ACTOR
from services.booking_service import BookingService
from services.errors import InvalidStateError, NotFoundError


class ExpiryService:
    """Перевод PENDING броней с прошедшей датой начала в EXPIRED"""

    def __init__(self, bookings: BookingService = None):
        self.bookings = bookings or BookingService()

    async def expire_stale_bookings(self) -> dict:
        """
        Истечь все PENDING брони, дата начала которых уже прошла.
        Каждая бронь обрабатывается в собственной транзакции.

        Returns:
            dict: Статистика {expired: int, skipped: int}
        """
        today = self.bookings.today()
        booking_ids = await self.bookings.list_stale_booking_ids(today)

        expired = 0
        skipped = 0
        for booking_id in booking_ids:
            try:
                await self.bookings.expire_booking(booking_id, actor=SYSTEM_ACTOR)
                expired += 1
            except (InvalidStateError, NotFoundError) as e:
                # Бронь успели подтвердить, отменить или удалить
                logger.info(f"⏭️ Бронь {booking_id} пропущена: {e.message}")
                skipped += 1

        stats = {"expired": expired, "skipped": skipped}
        logger.info(f"⌛ Проверка просроченных броней: {stats}")
        return stats


async def run_periodic_expiry(interval_minutes: int, service: ExpiryService = None):
    """
    Запустить периодическое истечение броней.

    Args:
        interval_minutes: Интервал между проверками в минутах
        service: Сервис истечения (по умолчанию с глобальными настройками БД)
    """
    service = service or ExpiryService()

    logger.info(f"🔄 Expiry runner started (interval: {interval_minutes}m)")

    while True:
        try:
            await service.expire_stale_bookings()
        except Exception as e:
            logger.exception(f"❌ Expiry error: {e}")

        # Ждем следующего запуска
        await asyncio.sleep(interval_minutes * 60)
