from .user import User, UserRole
from .car import Car, CarStatus
from .customer import Customer, CustomerStatus, Gender
from .booking import Booking, BookingStatus, BOOKING_TRANSITIONS
from .contract import RentalContract, ContractStatus, TERMINAL_CONTRACT_STATUSES
from .system_log import SystemLog, LogLevel
from .counter import Counter

__all__ = [
    "User", "UserRole",
    "Car", "CarStatus",
    "Customer", "CustomerStatus", "Gender",
    "Booking", "BookingStatus", "BOOKING_TRANSITIONS",
    "RentalContract", "ContractStatus", "TERMINAL_CONTRACT_STATUSES",
    "SystemLog", "LogLevel",
    "Counter",
]
