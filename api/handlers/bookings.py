"""
Обработчики броней для сотрудников и администраторов
"""
from aiohttp import web

from api.app_keys import BOOKING_SERVICE
from api.auth import ACTOR_KEY, Permission, require
from api.responses import dump, dump_many, parse_body, parse_query, run_with_retry, success
from api.schemas import BookingCreate, BookingListQuery, BookingOut, ContractOut, CreateDataOut


routes = web.RouteTableDef()


def _booking_id(request: web.Request) -> int:
    return int(request.match_info["booking_id"])


@routes.get("/api/bookings")
@require(Permission.MANAGE_RENTALS)
async def list_bookings(request: web.Request) -> web.Response:
    query = parse_query(request, BookingListQuery)
    bookings = await request.app[BOOKING_SERVICE].list_bookings(query.search, query.status)
    return web.json_response(dump_many(BookingOut, bookings))


@routes.get("/api/bookings/create-data")
@require(Permission.MANAGE_RENTALS)
async def create_data(request: web.Request) -> web.Response:
    data = await request.app[BOOKING_SERVICE].get_create_data()
    return web.json_response(CreateDataOut.model_validate(data).model_dump(mode="json"))


@routes.get(r"/api/bookings/customers/{customer_id:\d+}")
@require(Permission.MANAGE_RENTALS)
async def customer_bookings(request: web.Request) -> web.Response:
    customer_id = int(request.match_info["customer_id"])
    bookings = await request.app[BOOKING_SERVICE].list_customer_bookings(customer_id)
    return web.json_response(dump_many(BookingOut, bookings))


@routes.get(r"/api/bookings/{booking_id:\d+}")
@require(Permission.MANAGE_RENTALS)
async def get_booking(request: web.Request) -> web.Response:
    booking = await request.app[BOOKING_SERVICE].get_booking(_booking_id(request))
    return web.json_response(dump(BookingOut, booking))


@routes.post("/api/bookings")
@require(Permission.MANAGE_RENTALS)
async def create_booking(request: web.Request) -> web.Response:
    payload = await parse_body(request, BookingCreate)
    booking = await run_with_retry(
        request.app[BOOKING_SERVICE].create_booking,
        payload.customer_id,
        payload.car_id,
        payload.start_date,
        payload.end_date,
        notes=payload.notes,
        actor=request[ACTOR_KEY]
    )
    return success("Booking created successfully", status=201, booking=dump(BookingOut, booking))


@routes.post(r"/api/bookings/{booking_id:\d+}/confirm")
@require(Permission.MANAGE_RENTALS)
async def confirm_booking(request: web.Request) -> web.Response:
    contract = await run_with_retry(
        request.app[BOOKING_SERVICE].confirm_booking, _booking_id(request), actor=request[ACTOR_KEY]
    )
    return success(
        f"Booking confirmed, contract {contract.contract_number} created",
        contract=dump(ContractOut, contract)
    )


@routes.post(r"/api/bookings/{booking_id:\d+}/cancel")
@require(Permission.MANAGE_RENTALS)
async def cancel_booking(request: web.Request) -> web.Response:
    booking = await run_with_retry(
        request.app[BOOKING_SERVICE].cancel_booking, _booking_id(request), actor=request[ACTOR_KEY]
    )
    return success("Booking cancelled", booking=dump(BookingOut, booking))


@routes.post(r"/api/bookings/{booking_id:\d+}/complete")
@require(Permission.MANAGE_RENTALS)
async def complete_booking(request: web.Request) -> web.Response:
    booking = await run_with_retry(
        request.app[BOOKING_SERVICE].complete_booking, _booking_id(request), actor=request[ACTOR_KEY]
    )
    return success("Booking completed", booking=dump(BookingOut, booking))


@routes.post(r"/api/bookings/{booking_id:\d+}/expire")
@require(Permission.MANAGE_RENTALS)
async def expire_booking(request: web.Request) -> web.Response:
    booking = await run_with_retry(
        request.app[BOOKING_SERVICE].expire_booking, _booking_id(request), actor=request[ACTOR_KEY]
    )
    return success("Booking expired", booking=dump(BookingOut, booking))


@routes.delete(r"/api/bookings/{booking_id:\d+}")
@require(Permission.ADMINISTER)
async def delete_booking(request: web.Request) -> web.Response:
    await run_with_retry(
        request.app[BOOKING_SERVICE].delete_booking, _booking_id(request), actor=request[ACTOR_KEY]
    )
    return success("Booking deleted")
