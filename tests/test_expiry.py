from datetime import date, datetime

from database.models import Booking, BookingStatus, Car, CarStatus, SystemLog
from services.expiry_service import ExpiryService


async def test_expires_pending_bookings_that_already_started(booking_service, clock, fetch, make_car, make_customer):
    customer = await make_customer()
    stale_car = await make_car()
    future_car = await make_car()
    confirmed_car = await make_car()

    stale = await booking_service.create_booking(customer.id, stale_car.id, date(2025, 1, 21), date(2025, 1, 23))
    future = await booking_service.create_booking(customer.id, future_car.id, date(2025, 2, 10), date(2025, 2, 12))
    confirmed = await booking_service.create_booking(
        customer.id, confirmed_car.id, date(2025, 1, 21), date(2025, 1, 23)
    )
    await booking_service.confirm_booking(confirmed.id)

    clock.now = datetime(2025, 1, 25, 0, 5, 0)
    stats = await ExpiryService(booking_service).expire_stale_bookings()

    assert stats == {"expired": 1, "skipped": 0}
    assert (await fetch(Booking, stale.id)).status == BookingStatus.EXPIRED
    assert (await fetch(Car, stale_car.id)).status == CarStatus.AVAILABLE
    assert (await fetch(Booking, future.id)).status == BookingStatus.PENDING
    assert (await fetch(Booking, confirmed.id)).status == BookingStatus.CONFIRMED


async def test_expiry_is_attributed_to_system(booking_service, clock, session_factory, make_car, make_customer):
    customer = await make_customer()
    car = await make_car()
    await booking_service.create_booking(customer.id, car.id, date(2025, 1, 21), date(2025, 1, 23))

    clock.now = datetime(2025, 1, 22, 0, 0, 0)
    await ExpiryService(booking_service).expire_stale_bookings()

    async with session_factory() as session:
        entry = await session.get(SystemLog, 2)
    assert entry.action == "ExpireBooking"
    assert entry.user_id == "system"


async def test_nothing_to_expire(booking_service):
    assert await ExpiryService(booking_service).expire_stale_bookings() == {"expired": 0, "skipped": 0}


class RacingBookings:
    """Бронь успели отменить между выборкой и истечением"""

    def __init__(self, inner, booking_id):
        self.inner = inner
        self.booking_id = booking_id

    def today(self):
        return self.inner.today()

    async def list_stale_booking_ids(self, today):
        ids = await self.inner.list_stale_booking_ids(today)
        await self.inner.cancel_booking(self.booking_id)
        return ids

    async def expire_booking(self, booking_id, actor):
        return await self.inner.expire_booking(booking_id, actor=actor)


async def test_booking_cancelled_meanwhile_is_skipped(booking_service, clock, fetch, make_car, make_customer):
    customer = await make_customer()
    car = await make_car()
    booking = await booking_service.create_booking(customer.id, car.id, date(2025, 1, 21), date(2025, 1, 23))
    clock.now = datetime(2025, 1, 22, 0, 0, 0)

    stats = await ExpiryService(RacingBookings(booking_service, booking.id)).expire_stale_bookings()

    assert stats == {"expired": 0, "skipped": 1}
    assert (await fetch(Booking, booking.id)).status == BookingStatus.CANCELLED


async def test_booking_deleted_meanwhile_is_skipped(booking_service, clock, make_car, make_customer):
    customer = await make_customer()
    car = await make_car()
    booking = await booking_service.create_booking(customer.id, car.id, date(2025, 1, 21), date(2025, 1, 23))
    clock.now = datetime(2025, 1, 22, 0, 0, 0)

    class DeletingBookings(RacingBookings):
        async def list_stale_booking_ids(self, today):
            ids = await self.inner.list_stale_booking_ids(today)
            await self.inner.delete_booking(self.booking_id)
            return ids

    stats = await ExpiryService(DeletingBookings(booking_service, booking.id)).expire_stale_bookings()

    assert stats == {"expired": 0, "skipped": 1}
