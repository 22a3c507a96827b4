from sqlalchemy import Column, Integer, String
from database.base import Base


class Counter(Base):
    """Именованный счетчик для сквозной нумерации (номера договоров)"""
    __tablename__ = "counters"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<Counter(name={self.name}, value={self.value})>"
