"""Application configuration using pydantic-settings."""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All required database parameters must be provided via environment
    variables or a .env file. Missing required parameters will raise
    a ValidationError at application startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database - Required
    POSTGRES_HOST: str
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str

    # Redis - Optional with defaults
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379

    # Application
    SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    # Token role allowed to apply raw ledger syncs
    LEDGER_SERVICE_ROLE: str = "service_role"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Money movement
    BASE_CURRENCY: str = "NGN"
    TRANSFER_FEE_RATE: Decimal = Decimal("0.01")
    MIN_TRANSFER_AMOUNT: Decimal = Decimal("100")
    MAX_TRANSFER_AMOUNT: Decimal = Decimal("5000000")
    MIN_TOPUP_AMOUNT: Decimal = Decimal("100")

    # Withdrawal security
    WITHDRAWAL_OTP_TTL_MINUTES: int = 10
    PIN_HASH_ITERATIONS: int = 390_000

    # Flutterwave checkout
    FLUTTERWAVE_PUBLIC_KEY: str = ""
    FLUTTERWAVE_SECRET_KEY: str = ""
    FLUTTERWAVE_BASE_URL: str = "https://api.flutterwave.com/v3"

    # Reloadly telecom top-ups
    RELOADLY_CLIENT_ID: str = ""
    RELOADLY_CLIENT_SECRET: str = ""
    RELOADLY_AUTH_URL: str = "https://auth.reloadly.com/oauth/token"
    RELOADLY_BASE_URL: str = "https://topups.reloadly.com"

    PROVIDER_TIMEOUT_SECONDS: int = 30

    @property
    def database_url(self) -> str:
        """Construct async PostgreSQL database URL with asyncpg driver."""
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def celery_broker_url(self) -> str:
        """Construct Celery broker URL using Redis settings."""
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/0"

    @property
    def celery_result_backend(self) -> str:
        """Construct Celery result backend URL using Redis settings."""
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/0"

    @property
    def reloadly_configured(self) -> bool:
        return bool(self.RELOADLY_CLIENT_ID and self.RELOADLY_CLIENT_SECRET)


# Singleton settings instance - lazily loaded
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
