"""
Единый формат ответов API и преобразование ошибок
"""
from typing import Any, Iterable, Type

from aiohttp import web
from loguru import logger
from pydantic import BaseModel, ValidationError as PydanticValidationError

from services.errors import RentalError, RetryableError, ValidationError


def success(message: str, status: int = 200, **extra: Any) -> web.Response:
    """Ответ на действие: {success, message, ...extra}"""
    return web.json_response({"success": True, "message": message, **extra}, status=status)


def failure(message: str, code: str, status: int) -> web.Response:
    return web.json_response({"success": False, "message": message, "error": code}, status=status)


def dump(schema: Type[BaseModel], obj: Any) -> dict:
    return schema.model_validate(obj).model_dump(mode="json")


def dump_many(schema: Type[BaseModel], objs: Iterable[Any]) -> list:
    return [dump(schema, obj) for obj in objs]


def _describe(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "body"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


async def parse_body(request: web.Request, schema: Type[BaseModel]):
    try:
        data = await request.json()
    except ValueError:
        raise ValidationError("Request body must be valid JSON")
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e))


def parse_query(request: web.Request, schema: Type[BaseModel]):
    params = {key: value for key, value in request.query.items() if value != ""}
    try:
        return schema.model_validate(params)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e))


async def run_with_retry(operation, *args, **kwargs):
    """Выполнить операцию; при конфликте параллельной записи повторить один раз"""
    try:
        return await operation(*args, **kwargs)
    except RetryableError as e:
        logger.warning(f"🔁 Повтор операции {operation.__name__}: {e.message}")
        return await operation(*args, **kwargs)


@web.middleware
async def error_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except RentalError as e:
        return failure(e.message, e.code, e.status_code)
