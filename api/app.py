"""
HTTP API сервиса аренды автомобилей
"""
import asyncio

from aiohttp import web
from loguru import logger

from api.app_keys import ACCOUNT_SERVICE, BOOKING_SERVICE, CONTRACT_SERVICE
from api.auth import actor_middleware
from api.handlers import bookings, contracts, self_service
from api.responses import error_middleware
from services.account_service import AccountService
from services.booking_service import BookingService
from services.contract_service import ContractService


async def health_check(request: web.Request) -> web.Response:
    """Health check endpoint"""
    return web.Response(status=200, text="OK")


def create_app(
    booking_service: BookingService = None,
    contract_service: ContractService = None,
    account_service: AccountService = None
) -> web.Application:
    """
    Создать приложение API

    Args:
        booking_service: Сервис броней (по умолчанию с глобальной БД)
        contract_service: Сервис договоров
        account_service: Сервис учетных записей
    """
    # error_middleware внешний: ошибки проверки прав тоже в едином формате
    app = web.Application(middlewares=[error_middleware, actor_middleware])

    app[BOOKING_SERVICE] = booking_service or BookingService()
    app[CONTRACT_SERVICE] = contract_service or ContractService()
    app[ACCOUNT_SERVICE] = account_service or AccountService()

    # Маршруты
    app.router.add_get("/health", health_check)
    app.router.add_routes(bookings.routes)
    app.router.add_routes(contracts.routes)
    app.router.add_routes(self_service.routes)

    return app


async def run_api_server(host: str = "0.0.0.0", port: int = 8080):
    """
    Запустить API сервер

    Args:
        host: Хост для прослушивания
        port: Порт для прослушивания
    """
    app = create_app()
    runner = web.AppRunner(app)
    await runner.setup()

    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"🌐 API сервер запущен на http://{host}:{port}")
    logger.info(f"   - Брони: http://{host}:{port}/api/bookings")
    logger.info(f"   - Договоры: http://{host}:{port}/api/contracts")
    logger.info(f"   - Health check: GET http://{host}:{port}/health")

    try:
        # Держим сервер запущенным
        while True:
            await asyncio.sleep(3600)
    finally:
        await runner.cleanup()
