import os

# Настройки читаются при импорте config.settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import database.models  # noqa: F401
from database.base import Base
from database.models import (
    Car, CarStatus, Customer, CustomerStatus, RentalContract, ContractStatus,
    SystemLog, User, UserRole
)
from services.account_service import AccountService
from services.booking_service import BookingService
from services.contract_service import ContractService


class FakeClock:
    """Управляемые часы для сервисов"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 20, 9, 0, 0))


@pytest.fixture
def booking_service(session_factory, clock):
    return BookingService(session_factory=session_factory, clock=clock)


@pytest.fixture
def contract_service(session_factory, clock):
    return ContractService(session_factory=session_factory, clock=clock)


@pytest.fixture
def account_service(session_factory, clock):
    return AccountService(session_factory=session_factory, clock=clock)


@pytest.fixture
def make_car(session_factory, clock):
    counter = {"n": 0}

    async def factory(price_per_day="500000", status=CarStatus.AVAILABLE, name=None):
        counter["n"] += 1
        n = counter["n"]
        car = Car(
            name=name or f"Toyota Vios #{n}",
            license_plate=f"51A-{n:03d}.00",
            brand="Toyota",
            model="Vios",
            year=2022,
            type="Sedan",
            seats=5,
            fuel_type="Petrol",
            price_per_day=Decimal(price_per_day),
            status=status,
            created_at=clock.now,
            updated_at=None
        )
        async with session_factory() as session:
            session.add(car)
            await session.commit()
        return car

    return factory


@pytest.fixture
def make_customer(session_factory, clock):
    counter = {"n": 0}

    async def factory(status=CustomerStatus.ACTIVE, full_name=None, **overrides):
        counter["n"] += 1
        n = counter["n"]
        fields = dict(
            full_name=full_name or f"Nguyen Van {n}",
            phone_number=f"09000000{n:02d}",
            email=f"customer{n}@example.com",
            identity_number=f"0790000000{n:02d}",
            date_of_birth=date(1990, 5, 17),
            address="12 Le Loi, District 1",
            status=status,
            created_at=clock.now,
            updated_at=None
        )
        fields.update(overrides)
        customer = Customer(**fields)
        async with session_factory() as session:
            session.add(customer)
            await session.commit()
        return customer

    return factory


@pytest.fixture
def make_user(session_factory, clock):
    async def factory(user_id, role=UserRole.CUSTOMER, customer_id=None, is_active=True):
        user = User(
            id=user_id,
            username=f"user{user_id}",
            email=f"user{user_id}@example.com",
            role=role,
            is_active=is_active,
            customer_id=customer_id,
            created_at=clock.now,
            updated_at=None
        )
        async with session_factory() as session:
            session.add(user)
            await session.commit()
        return user

    return factory


@pytest.fixture
def make_contract(session_factory, clock):
    """Договор, вставленный напрямую, минуя сервис"""
    async def factory(customer, car, start_date, end_date, status=ContractStatus.ACTIVE, number=None):
        async with session_factory() as session:
            total = await session.scalar(select(func.count(RentalContract.id)))
            contract = RentalContract(
                customer_id=customer.id,
                car_id=car.id,
                contract_number=number or f"SEED{total + 1:04d}",
                start_date=start_date,
                end_date=end_date,
                rental_days=(end_date - start_date).days + 1,
                price_per_day=car.price_per_day,
                total_price=car.price_per_day * ((end_date - start_date).days + 1),
                deposit=Decimal("0"),
                status=status,
                created_at=clock.now,
                updated_at=None,
                signed_at=None
            )
            session.add(contract)
            await session.commit()
        return contract

    return factory


@pytest.fixture
def fetch(session_factory):
    """Свежая копия строки из базы"""
    async def loader(model, entity_id):
        async with session_factory() as session:
            return await session.get(model, entity_id)

    return loader


@pytest.fixture
def audit_actions(session_factory):
    async def loader():
        async with session_factory() as session:
            result = await session.execute(select(SystemLog).order_by(SystemLog.id))
            return list(result.scalars().all())

    return loader
