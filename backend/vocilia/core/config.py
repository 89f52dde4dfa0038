from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "vocilia-payments"
    version: str = "0.1.0"
    DEBUG: bool = False
    APP_DOMAIN: str = "vocilia.se"
    APP_DATABASE_DSN: str = "sqlite:////tmp/vocilia.db"
    REDIS_URL: str = "redis://localhost:6379"

    # Auth
    AUTH_JWT_SECRET: str = "change-me"
    AUTH_JWT_ALGORITHM: str = "HS256"

    # Weekly batch schedule (weekday 0 = Monday)
    BATCH_TIMEZONE: str = "Europe/Stockholm"
    BATCH_CRON_WEEKDAY: int = 0
    BATCH_CRON_HOUR: int = 2

    # Business invoicing
    ADMIN_FEE_RATE: Decimal = Decimal("0.20")
    INVOICE_PAYMENT_TERMS_DAYS: int = 7

    # Swish settings
    swish_environment: str = "mock"  # "mock", "test" or "live"
    swish_api_url: str = "https://mss.cpc.getswish.net/swish-cpcapi/api/v1"
    swish_merchant_alias: str = ""
    swish_cert_path: str = ""
    swish_key_path: str = ""
    SWISH_TIMEOUT_SECONDS: float = 30.0
    SWISH_MAX_RETRY_ATTEMPTS: int = 3

    # In-flight payout settlement
    PAYOUT_STALE_AFTER_MINUTES: int = 10
    PAYOUT_SETTLE_INTERVAL_MINUTES: int = 15

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:3001,http://localhost:3002"

    @property
    def swish_mocked(self) -> bool:
        return self.swish_environment == "mock"


settings = Settings()
