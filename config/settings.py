from decimal import Decimal

from pydantic_settings import BaseSettings
from pydantic import Field


DEFAULT_CONTRACT_TERMS = (
    "1. The customer shall use the car for its intended purpose and obey traffic law.\n"
    "2. The customer is responsible for keeping the car safe during the rental.\n"
    "3. Any damage caused by the customer is deducted from the deposit.\n"
    "4. The customer shall return the car at the agreed time and place."
)


class Settings(BaseSettings):
    # Database
    database_url: str = Field(...)

    # HTTP API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8080)

    # Политика аренды
    deposit_rate: Decimal = Field(default=Decimal("0.5"), ge=0, le=1)  # доля от итоговой суммы
    contract_number_prefix: str = Field(default="HD", max_length=4)
    max_rental_days: int = Field(default=365, ge=1)
    default_contract_terms: str = Field(default=DEFAULT_CONTRACT_TERMS, max_length=500)

    # Периодическое истечение броней (0 - отключено)
    expiry_interval_minutes: int = Field(default=0, ge=0)

    # Logging
    log_level: str = Field(default="INFO")
    log_file: str = Field(default="logs/api.log")

    class Config:
        # Порядок важен: сначала проверяется .env.local (для разработки),
        # затем .env (продакшн на сервере)
        env_file = [".env.local", ".env"]
        env_file_encoding = "utf-8"
        extra = "ignore"  # Игнорируем дополнительные поля


# Global settings instance
settings = Settings()
