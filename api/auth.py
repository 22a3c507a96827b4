"""
Определение пользователя запроса и проверка прав по роли.

Аутентификацию выполняет внешний провайдер (шлюз), который передает
идентификатор и роль пользователя в заголовках X-User-Id и X-User-Role.
"""
import enum
import functools

from aiohttp import web

from database.models.user import UserRole
from services.audit_service import Actor
from api.responses import failure


class Permission(enum.Enum):
    SELF_SERVICE = "self_service"        # Клиент управляет своими бронями
    MANAGE_RENTALS = "manage_rentals"    # Сотрудник оформляет брони и договоры
    ADMINISTER = "administer"            # Административное удаление


# Закрытая таблица: каждая роль обязана присутствовать
ROLE_PERMISSIONS = {
    UserRole.CUSTOMER: frozenset({Permission.SELF_SERVICE}),
    UserRole.EMPLOYEE: frozenset({Permission.MANAGE_RENTALS}),
    UserRole.ADMIN: frozenset({Permission.MANAGE_RENTALS, Permission.ADMINISTER}),
}

ACTOR_KEY = "actor"
PUBLIC_PATHS = frozenset({"/health"})


def resolve_actor(request: web.Request) -> Actor:
    """
    Построить Actor из заголовков запроса

    Raises:
        ValueError: Заголовки отсутствуют или содержат неизвестную роль
    """
    user_id = request.headers.get("X-User-Id")
    role = request.headers.get("X-User-Role")
    if not user_id or not role:
        raise ValueError("Missing X-User-Id or X-User-Role header")
    return Actor(
        user_id=int(user_id),
        role=UserRole(role.strip().lower()),
        ip_address=request.remote or ""
    )


@web.middleware
async def actor_middleware(request: web.Request, handler):
    if request.path in PUBLIC_PATHS:
        return await handler(request)

    try:
        request[ACTOR_KEY] = resolve_actor(request)
    except ValueError as e:
        return failure(str(e), "unauthorized", 401)

    return await handler(request)


def require(permission: Permission):
    """Декоратор обработчика: пропускает только роли с нужным правом"""
    def decorator(handler):
        @functools.wraps(handler)
        async def wrapper(request: web.Request):
            actor: Actor = request[ACTOR_KEY]
            if permission not in ROLE_PERMISSIONS[actor.role]:
                return failure(
                    f"Role {actor.role.value} is not allowed to perform this action",
                    "forbidden", 403
                )
            return await handler(request)
        return wrapper
    return decorator
