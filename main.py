import asyncio

from loguru import logger

from config.settings import settings
from database.base import init_db
from api.app import run_api_server
from services.expiry_service import run_periodic_expiry


async def main():
    """Главная функция запуска API"""

    # Настройка логирования
    logger.add(
        settings.log_file,
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"
    )

    logger.info("🚀 Запуск сервиса аренды...")

    expiry_task = None
    try:
        # Инициализация базы данных
        logger.info("🗄️ Инициализация базы данных...")
        await init_db()
        logger.info("✅ База данных инициализирована")

        # Истечение броней включается только явным интервалом
        if settings.expiry_interval_minutes > 0:
            expiry_task = asyncio.create_task(run_periodic_expiry(settings.expiry_interval_minutes))
        else:
            logger.info("⏸️ Автоматическое истечение броней отключено")

        await run_api_server(settings.api_host, settings.api_port)

    except Exception as e:
        logger.error(f"❌ Ошибка при запуске: {e}")
        raise
    finally:
        if expiry_task:
            expiry_task.cancel()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("👋 Сервис остановлен пользователем")
    except Exception as e:
        logger.error(f"💥 Критическая ошибка: {e}")
        raise
