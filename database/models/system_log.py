from sqlalchemy import Column, Integer, String, DateTime, Enum
from database.base import Base
import enum


class LogLevel(enum.Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class SystemLog(Base):
    """Журнал действий пользователей (только запись)"""
    __tablename__ = "system_logs"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String(100), nullable=False, index=True)
    description = Column(String(500), nullable=False)

    # Кто и откуда
    user_id = Column(String(50), nullable=False)
    user_role = Column(String(20), nullable=False)
    ip_address = Column(String(45), nullable=True)

    level = Column(Enum(LogLevel), default=LogLevel.INFO, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<SystemLog(id={self.id}, action={self.action}, user_id={self.user_id})>"
