"""
Сервис договоров аренды: прямое оформление, подписание, завершение,
расторжение, истечение и административное удаление.
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import select, or_

from config.settings import settings
from database.models.car import Car, CarStatus
from database.models.contract import RentalContract, ContractStatus
from database.models.customer import Customer
from services.audit_service import Actor, AuditService, SYSTEM_ACTOR
from services.errors import ValidationError, ConflictError, NotFoundError, InvalidStateError
from services.lifecycle import LifecycleService
from services.pricing import DayCountPolicy


class ContractService(LifecycleService):
    """Конечный автомат договора аренды"""

    async def create_contract(
        self,
        customer_id: int,
        car_id: int,
        start_date: date,
        end_date: date,
        price_per_day: Optional[Decimal] = None,
        terms: Optional[str] = None,
        notes: Optional[str] = None,
        actor: Actor = SYSTEM_ACTOR
    ) -> RentalContract:
        """
        Оформить договор напрямую, без предварительной брони.

        Args:
            customer_id: ID клиента
            car_id: ID автомобиля (должен быть свободен)
            start_date: Дата начала
            end_date: Дата окончания (строго позже начала)
            price_per_day: Цена за сутки; по умолчанию тариф автомобиля
            terms: Условия договора; по умолчанию стандартные
            notes: Комментарий
            actor: Кто выполняет операцию
        """
        async with self.transaction("CreateContract") as session:
            await self._get_or_404(session, Customer, customer_id, "Customer")

            if end_date <= start_date:
                raise ValidationError("End date must be after start date")

            car = await self._lock_car(session, car_id)
            if car is None:
                raise NotFoundError(f"Car {car_id} not found")
            if not car.is_available:
                raise ConflictError(f"Car {car_id} is not available ({car.status.value})")
            if await self.availability.has_conflict(session, car_id, start_date, end_date):
                raise ConflictError(f"Car {car_id} is already rented for the selected dates")

            rate = car.price_per_day if price_per_day is None else price_per_day
            quote = self.pricing.compute_rental(start_date, end_date, rate, DayCountPolicy.INCLUSIVE)
            if quote.rental_days > settings.max_rental_days:
                raise ValidationError(f"Rental cannot exceed {settings.max_rental_days} days")

            contract = await self._open_contract(
                session,
                customer_id=customer_id,
                car=car,
                start_date=start_date,
                end_date=end_date,
                rental_days=quote.rental_days,
                price_per_day=rate,
                total_price=quote.total_price,
                terms=terms,
                notes=notes
            )
            await AuditService.log_activity(
                session, actor, "CreateContract",
                f"Created contract {contract.contract_number} for car {car_id}",
                self.now()
            )

        logger.info(f"✅ Договор {contract.contract_number} оформлен: {quote.rental_days} дн., {quote.total_price}")
        return contract

    async def sign_contract(self, contract_id: int, actor: Actor = SYSTEM_ACTOR) -> RentalContract:
        """Подписать договор (повторное подписание просто обновляет отметку)"""
        async with self.transaction("SignContract") as session:
            contract = await self._get_active_or_draft(session, contract_id, "signed")

            contract.status = ContractStatus.ACTIVE
            contract.signed_at = self.now()
            contract.updated_at = self.now()

            await AuditService.log_activity(
                session, actor, "SignContract", f"Signed contract {contract.contract_number}", self.now()
            )

        logger.info(f"✍️ Договор {contract.contract_number} подписан")
        return contract

    async def complete_contract(self, contract_id: int, actor: Actor = SYSTEM_ACTOR) -> RentalContract:
        return await self._close_contract(contract_id, ContractStatus.COMPLETED, "CompleteContract", actor)

    async def cancel_contract(self, contract_id: int, actor: Actor = SYSTEM_ACTOR) -> RentalContract:
        return await self._close_contract(contract_id, ContractStatus.CANCELLED, "CancelContract", actor)

    async def expire_contract(self, contract_id: int, actor: Actor = SYSTEM_ACTOR) -> RentalContract:
        """Истечение договора (вызывается внешним планировщиком)"""
        return await self._close_contract(contract_id, ContractStatus.EXPIRED, "ExpireContract", actor)

    async def delete_contract(self, contract_id: int, actor: Actor = SYSTEM_ACTOR) -> None:
        """Административное удаление договора без проверки статуса"""
        async with self.transaction("DeleteContract") as session:
            contract = await self._get_or_404(session, RentalContract, contract_id, "Contract", lock=True)
            car = await self._lock_car(session, contract.car_id)
            if car is not None and car.status == CarStatus.RENTED:
                self._set_car_status(car, CarStatus.AVAILABLE)

            number = contract.contract_number
            await session.delete(contract)

            await AuditService.log_activity(
                session, actor, "DeleteContract", f"Deleted contract {number}", self.now()
            )

        logger.info(f"🗑️ Договор {number} удален")

    # ---- чтение ----

    async def get_contract(self, contract_id: int) -> RentalContract:
        async with self.read_session() as session:
            return await self._get_or_404(session, RentalContract, contract_id, "Contract")

    async def list_contracts(
        self,
        search: Optional[str] = None,
        status: Optional[ContractStatus] = None
    ) -> List[RentalContract]:
        stmt = (
            select(RentalContract)
            .join(Customer, RentalContract.customer_id == Customer.id)
            .join(Car, RentalContract.car_id == Car.id)
        )
        if search:
            stmt = stmt.where(or_(
                RentalContract.contract_number.contains(search),
                Customer.full_name.contains(search),
                Car.name.contains(search),
                Car.license_plate.contains(search)
            ))
        if status is not None:
            stmt = stmt.where(RentalContract.status == status)

        async with self.read_session() as session:
            result = await session.execute(
                stmt.order_by(RentalContract.created_at.desc(), RentalContract.id.desc())
            )
            return list(result.scalars().all())

    async def list_customer_contracts(self, customer_id: int) -> List[RentalContract]:
        async with self.read_session() as session:
            result = await session.execute(
                select(RentalContract)
                .where(RentalContract.customer_id == customer_id)
                .order_by(RentalContract.created_at.desc(), RentalContract.id.desc())
            )
            return list(result.scalars().all())

    async def get_print_data(self, contract_id: int) -> Dict[str, Any]:
        """Данные для печатной формы договора"""
        async with self.read_session() as session:
            contract = await self._get_or_404(session, RentalContract, contract_id, "Contract")
            customer = await session.get(Customer, contract.customer_id)
            car = await session.get(Car, contract.car_id)
            return {
                "contract": contract,
                "customer": customer,
                "car": car,
                "print_date": self.now()
            }

    async def find_available_cars(self, start_date: date, end_date: date) -> List[Car]:
        if end_date <= start_date:
            raise ValidationError("End date must be after start date")
        async with self.read_session() as session:
            return await self.availability.find_available_cars(session, start_date, end_date)

    # ---- внутреннее ----

    async def _get_active_or_draft(self, session, contract_id: int, verb: str) -> RentalContract:
        contract = await self._get_or_404(session, RentalContract, contract_id, "Contract", lock=True)
        if contract.is_terminal:
            raise InvalidStateError(
                f"Contract {contract.contract_number} is {contract.status.value} and cannot be {verb}"
            )
        return contract

    async def _close_contract(
        self,
        contract_id: int,
        target: ContractStatus,
        action: str,
        actor: Actor
    ) -> RentalContract:
        """Перевести договор в терминальный статус и освободить автомобиль"""
        async with self.transaction(action) as session:
            contract = await self._get_active_or_draft(session, contract_id, target.value)

            contract.status = target
            contract.updated_at = self.now()

            car = await self._lock_car(session, contract.car_id)
            if car is not None:
                self._set_car_status(car, CarStatus.AVAILABLE)

            await AuditService.log_activity(
                session, actor, action,
                f"Contract {contract.contract_number} → {target.value}",
                self.now()
            )

        logger.info(f"🏁 Договор {contract.contract_number}: {target.value}")
        return contract
