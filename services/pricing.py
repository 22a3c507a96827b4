"""
Расчет стоимости аренды и залога
"""
import enum
from datetime import date
from decimal import Decimal
from typing import NamedTuple, Optional, Union

from config.settings import settings


class DayCountPolicy(enum.Enum):
    """Способ подсчета дней аренды"""
    INCLUSIVE = "inclusive"   # оба конца периода входят: оформление сотрудником
    EXCLUSIVE = "exclusive"   # день возврата не считается: самообслуживание клиента


class RentalQuote(NamedTuple):
    rental_days: int
    total_price: Decimal


def _to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # float через str, чтобы не тащить двоичную погрешность
    return Decimal(str(value))


class PricingCalculator:
    """Калькулятор стоимости с единой ставкой залога из настроек"""

    def __init__(self, deposit_rate: Optional[Union[Decimal, str, float]] = None):
        rate = settings.deposit_rate if deposit_rate is None else _to_decimal(deposit_rate)
        if not Decimal("0") <= rate <= Decimal("1"):
            raise ValueError(f"Deposit rate must be within [0, 1], got {rate}")
        self.deposit_rate = rate

    @staticmethod
    def count_days(start_date: date, end_date: date, policy: DayCountPolicy) -> int:
        # timedelta.days уже округляет вниз для datetime
        days = (end_date - start_date).days
        if policy is DayCountPolicy.INCLUSIVE:
            return days + 1
        return days

    def compute_rental(
        self,
        start_date: date,
        end_date: date,
        price_per_day: Union[Decimal, int, str],
        policy: DayCountPolicy = DayCountPolicy.INCLUSIVE
    ) -> RentalQuote:
        """
        Посчитать количество дней и итоговую сумму.

        Args:
            start_date: Дата начала аренды
            end_date: Дата окончания (вызывающий код гарантирует end_date > start_date)
            price_per_day: Цена за сутки
            policy: Политика подсчета дней

        Returns:
            RentalQuote(rental_days, total_price)
        """
        rental_days = self.count_days(start_date, end_date, policy)
        total_price = _to_decimal(price_per_day) * rental_days
        return RentalQuote(rental_days=rental_days, total_price=total_price)

    def compute_deposit(self, total_price: Union[Decimal, int, str]) -> Decimal:
        return _to_decimal(total_price) * self.deposit_rate
