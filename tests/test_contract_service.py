from datetime import date, datetime
from decimal import Decimal

import pytest

from config.settings import settings
from database.models import Car, CarStatus, ContractStatus, RentalContract
from services.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError


MAR_1 = date(2025, 3, 1)
MAR_5 = date(2025, 3, 5)


@pytest.fixture
async def car(make_car):
    return await make_car(price_per_day="400000")


@pytest.fixture
async def customer(make_customer):
    return await make_customer()


async def test_direct_contract_uses_car_rate(contract_service, fetch, car, customer):
    contract = await contract_service.create_contract(customer.id, car.id, MAR_1, MAR_5, notes="Airport pickup")

    assert contract.status == ContractStatus.ACTIVE
    assert contract.rental_days == 5
    assert contract.price_per_day == Decimal("400000")
    assert contract.total_price == Decimal("2000000")
    assert contract.deposit == Decimal("1000000")
    assert contract.terms == settings.default_contract_terms
    assert contract.notes == "Airport pickup"
    assert contract.signed_at is None
    assert (await fetch(Car, car.id)).status == CarStatus.RENTED


async def test_direct_contract_with_explicit_rate_and_terms(contract_service, car, customer):
    contract = await contract_service.create_contract(
        customer.id, car.id, MAR_1, MAR_5, price_per_day=Decimal("350000"), terms="No smoking"
    )

    assert contract.total_price == Decimal("1750000")
    assert contract.terms == "No smoking"


async def test_direct_contract_requires_available_car(contract_service, make_car, customer):
    car = await make_car(status=CarStatus.RESERVED)

    with pytest.raises(ConflictError):
        await contract_service.create_contract(customer.id, car.id, MAR_1, MAR_5)


async def test_direct_contract_rejects_overlap(contract_service, make_contract, car, customer):
    await make_contract(customer, car, date(2025, 2, 25), MAR_1)

    with pytest.raises(ConflictError):
        await contract_service.create_contract(customer.id, car.id, MAR_1, MAR_5)


async def test_direct_contract_validation(contract_service, car, customer):
    with pytest.raises(ValidationError):
        await contract_service.create_contract(customer.id, car.id, MAR_5, MAR_1)
    with pytest.raises(NotFoundError):
        await contract_service.create_contract(999, car.id, MAR_1, MAR_5)
    with pytest.raises(NotFoundError):
        await contract_service.create_contract(customer.id, 999, MAR_1, MAR_5)


async def test_sign_sets_timestamp(contract_service, clock, car, customer):
    contract = await contract_service.create_contract(customer.id, car.id, MAR_1, MAR_5)
    clock.now = datetime(2025, 1, 21, 15, 30, 0)

    signed = await contract_service.sign_contract(contract.id)

    assert signed.status == ContractStatus.ACTIVE
    assert signed.signed_at == datetime(2025, 1, 21, 15, 30, 0)


async def test_sign_again_refreshes_timestamp(contract_service, clock, car, customer):
    contract = await contract_service.create_contract(customer.id, car.id, MAR_1, MAR_5)
    await contract_service.sign_contract(contract.id)
    clock.now = datetime(2025, 1, 22, 8, 0, 0)

    signed = await contract_service.sign_contract(contract.id)

    assert signed.signed_at == datetime(2025, 1, 22, 8, 0, 0)


@pytest.mark.parametrize("operation, status", [
    ("complete_contract", ContractStatus.COMPLETED),
    ("cancel_contract", ContractStatus.CANCELLED),
    ("expire_contract", ContractStatus.EXPIRED),
])
async def test_closing_a_contract_frees_the_car(contract_service, fetch, car, customer, operation, status):
    contract = await contract_service.create_contract(customer.id, car.id, MAR_1, MAR_5)

    closed = await getattr(contract_service, operation)(contract.id)

    assert closed.status == status
    assert (await fetch(Car, car.id)).status == CarStatus.AVAILABLE


@pytest.mark.parametrize("operation", ["sign_contract", "complete_contract", "cancel_contract", "expire_contract"])
async def test_terminal_contract_rejects_changes(contract_service, car, customer, operation):
    contract = await contract_service.create_contract(customer.id, car.id, MAR_1, MAR_5)
    await contract_service.complete_contract(contract.id)

    with pytest.raises(InvalidStateError):
        await getattr(contract_service, operation)(contract.id)


async def test_delete_contract_frees_rented_car(contract_service, fetch, car, customer):
    contract = await contract_service.create_contract(customer.id, car.id, MAR_1, MAR_5)

    await contract_service.delete_contract(contract.id)

    assert await fetch(RentalContract, contract.id) is None
    assert (await fetch(Car, car.id)).status == CarStatus.AVAILABLE


async def test_delete_contract_leaves_maintenance_car(contract_service, make_contract, fetch, make_car, customer):
    car = await make_car(status=CarStatus.MAINTENANCE)
    contract = await make_contract(customer, car, MAR_1, MAR_5, status=ContractStatus.COMPLETED)

    await contract_service.delete_contract(contract.id)

    assert (await fetch(Car, car.id)).status == CarStatus.MAINTENANCE


async def test_missing_contract(contract_service):
    with pytest.raises(NotFoundError):
        await contract_service.cancel_contract(404)
    with pytest.raises(NotFoundError):
        await contract_service.get_contract(404)


async def test_list_and_search_contracts(contract_service, make_car, make_customer):
    alice = await make_customer(full_name="Alice Tran")
    bob = await make_customer(full_name="Bob Le")
    first = await contract_service.create_contract(alice.id, (await make_car()).id, MAR_1, MAR_5)
    second = await contract_service.create_contract(bob.id, (await make_car()).id, MAR_1, MAR_5)
    await contract_service.complete_contract(second.id)

    assert {c.id for c in await contract_service.list_contracts()} == {first.id, second.id}
    assert [c.id for c in await contract_service.list_contracts(search=second.contract_number)] == [second.id]
    assert [c.id for c in await contract_service.list_contracts(search="Alice")] == [first.id]
    assert [c.id for c in await contract_service.list_contracts(status=ContractStatus.COMPLETED)] == [second.id]
    assert [c.id for c in await contract_service.list_customer_contracts(alice.id)] == [first.id]


async def test_print_data(contract_service, clock, car, customer):
    contract = await contract_service.create_contract(customer.id, car.id, MAR_1, MAR_5)

    data = await contract_service.get_print_data(contract.id)

    assert data["contract"].id == contract.id
    assert data["customer"].id == customer.id
    assert data["car"].id == car.id
    assert data["print_date"] == clock.now


async def test_find_available_cars_excludes_rented(contract_service, make_car, car, customer):
    other = await make_car()
    await contract_service.create_contract(customer.id, car.id, MAR_1, MAR_5)

    cars = await contract_service.find_available_cars(date(2025, 3, 3), date(2025, 3, 8))

    assert [c.id for c in cars] == [other.id]


async def test_find_available_cars_rejects_bad_range(contract_service):
    with pytest.raises(ValidationError):
        await contract_service.find_available_cars(MAR_5, MAR_1)


async def test_contract_operations_are_audited(contract_service, audit_actions, car, customer):
    contract = await contract_service.create_contract(customer.id, car.id, MAR_1, MAR_5)
    await contract_service.sign_contract(contract.id)
    await contract_service.complete_contract(contract.id)
    await contract_service.delete_contract(contract.id)

    entries = await audit_actions()

    assert [e.action for e in entries] == ["CreateContract", "SignContract", "CompleteContract", "DeleteContract"]
    assert all(e.user_id == "system" for e in entries)
