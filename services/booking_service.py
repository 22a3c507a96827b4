"""
Сервис бронирования: создание, подтверждение (с выпуском договора), отмена,
завершение, истечение и административное удаление броней.
"""
import enum
from datetime import date
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import select, or_

from database.models.booking import Booking, BookingStatus
from database.models.car import Car, CarStatus
from database.models.contract import RentalContract
from database.models.customer import Customer, CustomerStatus
from config.settings import settings
from services.audit_service import Actor, AuditService, SYSTEM_ACTOR
from services.errors import ValidationError, ConflictError, NotFoundError, InvalidStateError
from services.lifecycle import LifecycleService
from services.pricing import DayCountPolicy


class BookingFlow(enum.Enum):
    EMPLOYEE = "employee"          # Оформление сотрудником
    SELF_SERVICE = "self_service"  # Клиент бронирует сам


# Политика подсчета дней и резервирование автомобиля для каждого сценария
FLOW_POLICIES = {
    BookingFlow.EMPLOYEE: DayCountPolicy.INCLUSIVE,
    BookingFlow.SELF_SERVICE: DayCountPolicy.EXCLUSIVE,
}
FLOW_RESERVES_CAR = {
    BookingFlow.EMPLOYEE: True,
    BookingFlow.SELF_SERVICE: False,
}


class BookingService(LifecycleService):
    """Конечный автомат брони"""

    async def create_booking(
        self,
        customer_id: int,
        car_id: int,
        start_date: date,
        end_date: date,
        notes: Optional[str] = None,
        flow: BookingFlow = BookingFlow.EMPLOYEE,
        actor: Actor = SYSTEM_ACTOR
    ) -> Booking:
        """
        Создать бронь в статусе PENDING.

        Args:
            customer_id: ID клиента
            car_id: ID автомобиля
            start_date: Дата начала (не раньше сегодняшней)
            end_date: Дата окончания (строго позже начала)
            notes: Комментарий
            flow: Сценарий оформления (определяет подсчет дней и резерв автомобиля)
            actor: Кто выполняет операцию

        Raises:
            NotFoundError: Клиент или автомобиль не найдены
            ValidationError: Неполный профиль, неактивный клиент, некорректные даты
            ConflictError: Автомобиль недоступен или занят на эти даты
        """
        async with self.transaction("CreateBooking") as session:
            today = self.today()

            customer = await self._get_or_404(session, Customer, customer_id, "Customer")
            if not customer.is_active:
                raise ValidationError(f"Customer {customer_id} is {customer.status.value} and cannot book")
            if not customer.has_complete_profile(today):
                raise ValidationError("Customer profile must be complete before booking")

            if end_date <= start_date:
                raise ValidationError("End date must be after start date")
            if start_date < today:
                raise ValidationError("Start date cannot be in the past")

            car = await self._lock_car(session, car_id)
            if car is None:
                raise NotFoundError(f"Car {car_id} not found")
            if not car.is_available:
                raise ConflictError(f"Car {car_id} is not available ({car.status.value})")
            if await self.availability.has_conflict(session, car_id, start_date, end_date):
                raise ConflictError(f"Car {car_id} is already booked for the selected dates")

            quote = self.pricing.compute_rental(start_date, end_date, car.price_per_day, FLOW_POLICIES[flow])
            if quote.rental_days > settings.max_rental_days:
                raise ValidationError(f"Rental cannot exceed {settings.max_rental_days} days")

            booking = Booking(
                customer_id=customer_id,
                car_id=car_id,
                start_date=start_date,
                end_date=end_date,
                rental_days=quote.rental_days,
                total_price=quote.total_price,
                notes=notes,
                status=BookingStatus.PENDING,
                reserves_car=FLOW_RESERVES_CAR[flow],
                created_at=self.now(),
                updated_at=None
            )
            session.add(booking)

            if FLOW_RESERVES_CAR[flow]:
                self._set_car_status(car, CarStatus.RESERVED)

            await session.flush()  # Получаем booking.id
            await AuditService.log_activity(
                session, actor, "CreateBooking",
                f"Created booking #{booking.id} for car {car_id} ({flow.value})",
                self.now()
            )

        logger.info(f"✅ Бронь {booking.id} создана: {quote.rental_days} дн., {quote.total_price}")
        return booking

    async def confirm_booking(self, booking_id: int, actor: Actor = SYSTEM_ACTOR) -> RentalContract:
        """Подтвердить бронь и выпустить по ней действующий договор"""
        async with self.transaction("ConfirmBooking") as session:
            booking = await self._get_or_404(session, Booking, booking_id, "Booking", lock=True)
            self._ensure_transition(booking, BookingStatus.CONFIRMED)

            car = await self._lock_car(session, booking.car_id)
            if car is None:
                raise NotFoundError(f"Car {booking.car_id} not found")

            # Зарезервированный автомобиль ждет именно эту бронь, остальные должны быть свободны
            expected = CarStatus.RESERVED if booking.reserves_car else CarStatus.AVAILABLE
            if car.status != expected:
                raise ConflictError(f"Car {car.id} is not available ({car.status.value})")
            if await self.availability.has_conflict(session, car.id, booking.start_date, booking.end_date):
                raise ConflictError(f"Car {car.id} is already rented for the selected dates")

            booking.status = BookingStatus.CONFIRMED
            booking.updated_at = self.now()

            contract = await self._open_contract(
                session,
                customer_id=booking.customer_id,
                car=car,
                start_date=booking.start_date,
                end_date=booking.end_date,
                rental_days=booking.rental_days,
                price_per_day=car.price_per_day,
                total_price=booking.total_price,
                terms=None,
                notes=booking.notes
            )
            await AuditService.log_activity(
                session, actor, "ConfirmBooking",
                f"Confirmed booking #{booking_id}, issued contract {contract.contract_number}",
                self.now()
            )

        logger.info(f"✅ Бронь {booking_id} подтверждена, договор {contract.contract_number}")
        return contract

    async def cancel_booking(
        self,
        booking_id: int,
        actor: Actor = SYSTEM_ACTOR,
        customer_id: Optional[int] = None
    ) -> Booking:
        """
        Отменить бронь (PENDING или CONFIRMED).
        Если передан customer_id, отменить можно только собственную бронь.
        """
        async with self.transaction("CancelBooking") as session:
            booking = await self._get_or_404(session, Booking, booking_id, "Booking", lock=True)
            if customer_id is not None and booking.customer_id != customer_id:
                raise NotFoundError(f"Booking {booking_id} not found")
            self._ensure_transition(booking, BookingStatus.CANCELLED)

            booking.status = BookingStatus.CANCELLED
            booking.updated_at = self.now()
            await self._release_reserved_car(session, booking.car_id)

            await AuditService.log_activity(
                session, actor, "CancelBooking", f"Cancelled booking #{booking_id}", self.now()
            )

        logger.info(f"🚫 Бронь {booking_id} отменена")
        return booking

    async def complete_booking(self, booking_id: int, actor: Actor = SYSTEM_ACTOR) -> Booking:
        async with self.transaction("CompleteBooking") as session:
            booking = await self._get_or_404(session, Booking, booking_id, "Booking", lock=True)
            self._ensure_transition(booking, BookingStatus.COMPLETED)

            booking.status = BookingStatus.COMPLETED
            booking.updated_at = self.now()

            await AuditService.log_activity(
                session, actor, "CompleteBooking", f"Completed booking #{booking_id}", self.now()
            )

        logger.info(f"🏁 Бронь {booking_id} завершена")
        return booking

    async def expire_booking(self, booking_id: int, actor: Actor = SYSTEM_ACTOR) -> Booking:
        """Перевести бронь в EXPIRED (вызывается внешним планировщиком)"""
        async with self.transaction("ExpireBooking") as session:
            booking = await self._get_or_404(session, Booking, booking_id, "Booking", lock=True)
            self._ensure_transition(booking, BookingStatus.EXPIRED)

            booking.status = BookingStatus.EXPIRED
            booking.updated_at = self.now()
            await self._release_reserved_car(session, booking.car_id)

            await AuditService.log_activity(
                session, actor, "ExpireBooking", f"Expired booking #{booking_id}", self.now()
            )

        logger.info(f"⌛ Бронь {booking_id} истекла")
        return booking

    async def delete_booking(self, booking_id: int, actor: Actor = SYSTEM_ACTOR) -> None:
        """Административное удаление брони без проверки статуса"""
        async with self.transaction("DeleteBooking") as session:
            booking = await self._get_or_404(session, Booking, booking_id, "Booking", lock=True)
            await self._release_reserved_car(session, booking.car_id)
            await session.delete(booking)

            await AuditService.log_activity(
                session, actor, "DeleteBooking", f"Deleted booking #{booking_id}", self.now()
            )

        logger.info(f"🗑️ Бронь {booking_id} удалена")

    # ---- чтение ----

    async def get_booking(self, booking_id: int) -> Booking:
        async with self.read_session() as session:
            return await self._get_or_404(session, Booking, booking_id, "Booking")

    async def list_bookings(
        self,
        search: Optional[str] = None,
        status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        """Список броней с поиском по клиенту, названию и номеру автомобиля"""
        stmt = (
            select(Booking)
            .join(Customer, Booking.customer_id == Customer.id)
            .join(Car, Booking.car_id == Car.id)
        )
        if search:
            stmt = stmt.where(or_(
                Customer.full_name.contains(search),
                Car.name.contains(search),
                Car.license_plate.contains(search)
            ))
        if status is not None:
            stmt = stmt.where(Booking.status == status)

        async with self.read_session() as session:
            result = await session.execute(stmt.order_by(Booking.created_at.desc(), Booking.id.desc()))
            return list(result.scalars().all())

    async def list_customer_bookings(self, customer_id: int) -> List[Booking]:
        async with self.read_session() as session:
            result = await session.execute(
                select(Booking)
                .where(Booking.customer_id == customer_id)
                .order_by(Booking.created_at.desc(), Booking.id.desc())
            )
            return list(result.scalars().all())

    async def list_stale_booking_ids(self, today: date) -> List[int]:
        """PENDING брони, дата начала которых уже прошла"""
        async with self.read_session() as session:
            result = await session.execute(
                select(Booking.id).where(
                    Booking.status == BookingStatus.PENDING,
                    Booking.start_date < today
                )
            )
            return list(result.scalars().all())

    async def get_create_data(self) -> Dict[str, Any]:
        """Активные клиенты и свободные автомобили для формы оформления"""
        async with self.read_session() as session:
            customers = await session.execute(
                select(Customer).where(Customer.status == CustomerStatus.ACTIVE).order_by(Customer.full_name)
            )
            cars = await session.execute(
                select(Car).where(Car.status == CarStatus.AVAILABLE).order_by(Car.name)
            )
            return {
                "customers": list(customers.scalars().all()),
                "cars": list(cars.scalars().all())
            }

    # ---- внутреннее ----

    @staticmethod
    def _ensure_transition(booking: Booking, target: BookingStatus):
        if not booking.can_transition_to(target):
            raise InvalidStateError(
                f"Booking {booking.id} is {booking.status.value} and cannot become {target.value}"
            )

    async def _release_reserved_car(self, session, car_id: int):
        car = await self._lock_car(session, car_id)
        if car is not None and car.status == CarStatus.RESERVED:
            self._set_car_status(car, CarStatus.AVAILABLE)
