"""
Личный кабинет клиента: свои брони и договоры
"""
from aiohttp import web

from api.app_keys import ACCOUNT_SERVICE, BOOKING_SERVICE, CONTRACT_SERVICE
from api.auth import ACTOR_KEY, Permission, require
from api.responses import dump, dump_many, parse_body, run_with_retry, success
from api.schemas import BookingOut, ContractOut, SelfServiceBookingCreate
from services.booking_service import BookingFlow


routes = web.RouteTableDef()


async def _current_customer_id(request: web.Request) -> int:
    customer = await request.app[ACCOUNT_SERVICE].get_customer_for_user(request[ACTOR_KEY].user_id)
    return customer.id


@routes.get("/api/me/bookings")
@require(Permission.SELF_SERVICE)
async def my_bookings(request: web.Request) -> web.Response:
    customer_id = await _current_customer_id(request)
    bookings = await request.app[BOOKING_SERVICE].list_customer_bookings(customer_id)
    return web.json_response(dump_many(BookingOut, bookings))


@routes.post("/api/me/bookings")
@require(Permission.SELF_SERVICE)
async def create_my_booking(request: web.Request) -> web.Response:
    customer_id = await _current_customer_id(request)
    payload = await parse_body(request, SelfServiceBookingCreate)
    booking = await run_with_retry(
        request.app[BOOKING_SERVICE].create_booking,
        customer_id,
        payload.car_id,
        payload.start_date,
        payload.end_date,
        notes=payload.notes,
        flow=BookingFlow.SELF_SERVICE,
        actor=request[ACTOR_KEY]
    )
    return success("Booking created successfully", status=201, booking=dump(BookingOut, booking))


@routes.post(r"/api/me/bookings/{booking_id:\d+}/cancel")
@require(Permission.SELF_SERVICE)
async def cancel_my_booking(request: web.Request) -> web.Response:
    customer_id = await _current_customer_id(request)
    booking = await run_with_retry(
        request.app[BOOKING_SERVICE].cancel_booking,
        int(request.match_info["booking_id"]),
        actor=request[ACTOR_KEY],
        customer_id=customer_id
    )
    return success("Booking cancelled", booking=dump(BookingOut, booking))


@routes.get("/api/me/contracts")
@require(Permission.SELF_SERVICE)
async def my_contracts(request: web.Request) -> web.Response:
    customer_id = await _current_customer_id(request)
    contracts = await request.app[CONTRACT_SERVICE].list_customer_contracts(customer_id)
    return web.json_response(dump_many(ContractOut, contracts))
