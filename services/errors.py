"""
Ошибки жизненного цикла аренды.
Все они восстановимы на границе запроса и превращаются в структурированный ответ.
"""


class RentalError(Exception):
    """Базовая ошибка операций бронирования и договоров"""

    code = "rental_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RentalError):
    """Некорректные входные данные (даты, неполный профиль клиента)"""

    code = "validation_error"
    status_code = 400


class NotFoundError(RentalError):
    code = "not_found"
    status_code = 404


class ConflictError(RentalError):
    """Автомобиль недоступен или занят на выбранные даты"""

    code = "conflict"
    status_code = 409


class InvalidStateError(RentalError):
    """Операция не разрешена в текущем статусе"""

    code = "invalid_state"
    status_code = 409


class RetryableError(RentalError):
    """Конфликт конкурентной записи; операцию можно повторить один раз"""

    code = "retryable"
    status_code = 503
