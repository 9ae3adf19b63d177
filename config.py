
from pydantic_settings import BaseSettings, SettingsConfigDict


class ENV(BaseSettings):
    model_config = SettingsConfigDict(validate_default=True, env_file=".env", env_file_encoding="utf-8")

    DEBUG: bool = False

    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"
    POSTGRES_NAME: str = "split_ledger"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASS: str = "postgres"
    DATABASE_URL: str = ""

    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"
    CELERY_TIMEZONE: str = "UTC"

    SERVICE_API_TOKEN: str = "change-me"
    NOTIFY_WEBHOOK_URL: str = ""

    # defaults used when neither the organization nor platform_settings define a policy
    PLATFORM_FEE_PERCENT: str = "4.99"
    PLATFORM_FEE_FIXED_CENTS: int = 100
    RELEASE_DAYS: int = 14
    RELEASE_INTERVAL_SECONDS: int = 3600


class Settings():
    def __init__(self):
        self.env = ENV()

    def generate_postgres_url(self) -> str:
        if self.env.DATABASE_URL:
            return self.env.DATABASE_URL
        return f"postgresql+asyncpg://{self.env.POSTGRES_USER}:{self.env.POSTGRES_PASS}@{self.env.POSTGRES_HOST}:{self.env.POSTGRES_PORT}/{self.env.POSTGRES_NAME}"
