from aiohttp import web

from services.account_service import AccountService
from services.booking_service import BookingService
from services.contract_service import ContractService


BOOKING_SERVICE = web.AppKey("booking_service", BookingService)
CONTRACT_SERVICE = web.AppKey("contract_service", ContractService)
ACCOUNT_SERVICE = web.AppKey("account_service", AccountService)
