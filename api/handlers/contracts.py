"""
Обработчики договоров аренды и поиска свободных автомобилей
"""
from aiohttp import web

from api.app_keys import CONTRACT_SERVICE
from api.auth import ACTOR_KEY, Permission, require
from api.responses import dump, dump_many, parse_body, parse_query, run_with_retry, success
from api.schemas import (
    AvailabilityQuery, CarOut, ContractCreate, ContractListQuery, ContractOut, ContractPrintOut
)


routes = web.RouteTableDef()


def _contract_id(request: web.Request) -> int:
    return int(request.match_info["contract_id"])


@routes.get("/api/contracts")
@require(Permission.MANAGE_RENTALS)
async def list_contracts(request: web.Request) -> web.Response:
    query = parse_query(request, ContractListQuery)
    contracts = await request.app[CONTRACT_SERVICE].list_contracts(query.search, query.status)
    return web.json_response(dump_many(ContractOut, contracts))


@routes.get(r"/api/contracts/customers/{customer_id:\d+}")
@require(Permission.MANAGE_RENTALS)
async def customer_contracts(request: web.Request) -> web.Response:
    customer_id = int(request.match_info["customer_id"])
    contracts = await request.app[CONTRACT_SERVICE].list_customer_contracts(customer_id)
    return web.json_response(dump_many(ContractOut, contracts))


@routes.get(r"/api/contracts/{contract_id:\d+}")
@require(Permission.MANAGE_RENTALS)
async def get_contract(request: web.Request) -> web.Response:
    contract = await request.app[CONTRACT_SERVICE].get_contract(_contract_id(request))
    return web.json_response(dump(ContractOut, contract))


@routes.get(r"/api/contracts/{contract_id:\d+}/print")
@require(Permission.MANAGE_RENTALS)
async def print_contract(request: web.Request) -> web.Response:
    data = await request.app[CONTRACT_SERVICE].get_print_data(_contract_id(request))
    return web.json_response(ContractPrintOut.model_validate(data).model_dump(mode="json"))


@routes.post("/api/contracts")
@require(Permission.MANAGE_RENTALS)
async def create_contract(request: web.Request) -> web.Response:
    payload = await parse_body(request, ContractCreate)
    contract = await run_with_retry(
        request.app[CONTRACT_SERVICE].create_contract,
        payload.customer_id,
        payload.car_id,
        payload.start_date,
        payload.end_date,
        price_per_day=payload.price_per_day,
        terms=payload.terms,
        notes=payload.notes,
        actor=request[ACTOR_KEY]
    )
    return success(
        f"Contract {contract.contract_number} created",
        status=201,
        contract=dump(ContractOut, contract)
    )


@routes.post(r"/api/contracts/{contract_id:\d+}/sign")
@require(Permission.MANAGE_RENTALS)
async def sign_contract(request: web.Request) -> web.Response:
    contract = await run_with_retry(
        request.app[CONTRACT_SERVICE].sign_contract, _contract_id(request), actor=request[ACTOR_KEY]
    )
    return success("Contract signed", contract=dump(ContractOut, contract))


@routes.post(r"/api/contracts/{contract_id:\d+}/complete")
@require(Permission.MANAGE_RENTALS)
async def complete_contract(request: web.Request) -> web.Response:
    contract = await run_with_retry(
        request.app[CONTRACT_SERVICE].complete_contract, _contract_id(request), actor=request[ACTOR_KEY]
    )
    return success("Contract completed", contract=dump(ContractOut, contract))


@routes.post(r"/api/contracts/{contract_id:\d+}/cancel")
@require(Permission.MANAGE_RENTALS)
async def cancel_contract(request: web.Request) -> web.Response:
    contract = await run_with_retry(
        request.app[CONTRACT_SERVICE].cancel_contract, _contract_id(request), actor=request[ACTOR_KEY]
    )
    return success("Contract cancelled", contract=dump(ContractOut, contract))


@routes.post(r"/api/contracts/{contract_id:\d+}/expire")
@require(Permission.MANAGE_RENTALS)
async def expire_contract(request: web.Request) -> web.Response:
    contract = await run_with_retry(
        request.app[CONTRACT_SERVICE].expire_contract, _contract_id(request), actor=request[ACTOR_KEY]
    )
    return success("Contract expired", contract=dump(ContractOut, contract))


@routes.delete(r"/api/contracts/{contract_id:\d+}")
@require(Permission.ADMINISTER)
async def delete_contract(request: web.Request) -> web.Response:
    await run_with_retry(
        request.app[CONTRACT_SERVICE].delete_contract, _contract_id(request), actor=request[ACTOR_KEY]
    )
    return success("Contract deleted")


@routes.get("/api/cars/available")
async def available_cars(request: web.Request) -> web.Response:
    """Доступно любой аутентифицированной роли"""
    query = parse_query(request, AvailabilityQuery)
    cars = await request.app[CONTRACT_SERVICE].find_available_cars(query.start_date, query.end_date)
    return web.json_response(dump_many(CarOut, cars))
