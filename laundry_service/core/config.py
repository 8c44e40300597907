from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str
    rabbitmq_url: str
    service_name: str = "laundry-service"
    log_level: str = "INFO"
    cors_origins: str = "*"
    rabbitmq_prefetch_count: int = 10
    rabbitmq_exchange: str = "laundry"
    db_pool_size: int = 20
    db_max_overflow: int = 10
    db_max_retries: int = 3

    outbox_poll_interval: int = 5
    outbox_batch_size: int = 100
    outbox_max_retries: int = 3

    free_delivery_threshold: Decimal = Decimal("1000")
    delivery_fee: Decimal = Decimal("100")
    express_fee_rate: Decimal = Decimal("0.5")
    default_estimated_hours: int = 24

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v.startswith("postgresql"):
            raise ValueError("Only PostgreSQL is supported")
        return v


settings = Settings()
