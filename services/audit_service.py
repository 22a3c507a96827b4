"""
Журнал действий: одна запись на каждую изменяющую операцию.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from database.models.system_log import SystemLog, LogLevel
from database.models.user import UserRole


@dataclass(frozen=True)
class Actor:
    """Кто выполняет операцию (выдается провайдером аутентификации)"""
    user_id: Optional[int]
    role: UserRole
    ip_address: str = ""

    @property
    def label(self) -> str:
        return "system" if self.user_id is None else str(self.user_id)


# Фоновые задачи (например, истечение броней)
SYSTEM_ACTOR = Actor(user_id=None, role=UserRole.ADMIN)


class AuditService:
    """Запись действий в system_logs в рамках транзакции операции"""

    @staticmethod
    async def log_activity(
        session: AsyncSession,
        actor: Actor,
        action: str,
        description: str,
        timestamp: datetime,
        level: LogLevel = LogLevel.INFO
    ) -> SystemLog:
        entry = SystemLog(
            action=action,
            description=description,
            user_id=actor.label,
            user_role=actor.role.value,
            ip_address=actor.ip_address or None,
            level=level,
            timestamp=timestamp
        )
        session.add(entry)
        logger.info(f"📝 {action}: {description} (user={actor.label}, ip={actor.ip_address or '-'})")
        return entry
