from decimal import Decimal
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration based on Pydantic BaseSettings.
    Values are loaded automatically from environment variables and `.env`.
    """

    # API Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "MedBook Scheduling API"
    PROJECT_DESCRIPTION: str = "Appointment scheduling and booking engine for doctors and hospitals"
    VERSION: str = "0.1.0"

    # Application Settings
    DEBUG: bool = Field(False, description="Debug mode")
    ENVIRONMENT: str = Field("production", description="Runtime environment")
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FORMAT: str = Field("colored", description="Log format: colored, json or plain")
    LOG_FILE: str | None = Field(None, description="Optional JSON log file path")
    CORS_ORIGINS: list[str] = Field(default_factory=list, description="Allowed CORS origins outside DEBUG")

    # Sentry Configuration
    SENTRY_DSN: str | None = Field(None, description="Sentry DSN for error tracking")

    # PostgreSQL Database Settings
    DB_HOST: str = Field("localhost", description="PostgreSQL host")
    DB_PORT: int = Field(5432, description="PostgreSQL port")
    DB_NAME: str = Field("medbook", description="Database name")
    DB_USER: str = Field("medbook", description="PostgreSQL user")
    DB_PASSWORD: str | None = Field(None, description="PostgreSQL password")
    DB_ECHO: bool = Field(False, description="Log SQL queries (debug only)")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(20, description="Connection pool size")
    DB_MAX_OVERFLOW: int = Field(30, description="Maximum pool overflow")
    DB_POOL_RECYCLE: int = Field(3600, description="Recycle connections every N seconds")
    DB_POOL_TIMEOUT: int = Field(30, description="Timeout to obtain a pooled connection")

    # Scheduling
    OPERATING_TIMEZONE: str = Field("Asia/Kolkata", description="Timezone all slot times are expressed in")
    SLOT_GENERATION_MAX_ITERATIONS: int = Field(1440, description="Upper bound of slots generated per day")
    DEFAULT_SLOT_DURATION_MINUTES: int = Field(15, description="Slot duration when the doctor has none")
    DEFAULT_MAX_PATIENTS_PER_SLOT: int = Field(1, description="Slot capacity when the doctor has none")
    AVAILABILITY_DEFAULT_DAYS: int = Field(7, description="Days returned by availability when not requested")
    AVAILABILITY_MAX_DAYS: int = Field(30, description="Largest availability window a caller may request")

    # Booking
    BOOKING_RESERVATION_RETRIES: int = Field(1, description="Retries after losing a slot reservation race")
    PLATFORM_FEE_PERCENTAGE: Decimal = Field(
        Decimal("0"), description="Platform fee as a percentage of the consultation fee (0 disables it)"
    )

    # External collaborators
    PAYMENT_SERVICE_URL: str | None = Field(None, description="Base URL of the payment service")
    NOTIFICATION_SERVICE_URL: str | None = Field(None, description="Base URL of the notification service")
    INTEGRATION_TIMEOUT_SECONDS: float = Field(10.0, description="Timeout for collaborator HTTP calls")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def __init__(self, **data: Any):
        super().__init__(**data)

    @field_validator("OPERATING_TIMEZONE")
    @classmethod
    def validate_timezone(cls, v):
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"OPERATING_TIMEZONE '{v}' is not a known IANA timezone") from e
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        if v not in ("colored", "json", "plain"):
            raise ValueError("LOG_FORMAT must be one of: colored, json, plain")
        return v

    @field_validator("SLOT_GENERATION_MAX_ITERATIONS", "DEFAULT_SLOT_DURATION_MINUTES", "DEFAULT_MAX_PATIENTS_PER_SLOT")
    @classmethod
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @field_validator("AVAILABILITY_MAX_DAYS")
    @classmethod
    def validate_max_days(cls, v):
        if v < 1:
            raise ValueError("AVAILABILITY_MAX_DAYS must be at least 1")
        if v > 366:
            raise ValueError("AVAILABILITY_MAX_DAYS should not exceed 366")
        return v

    @field_validator("BOOKING_RESERVATION_RETRIES")
    @classmethod
    def validate_retries(cls, v):
        if v < 0:
            raise ValueError("BOOKING_RESERVATION_RETRIES must be 0 or greater")
        return v

    @field_validator("PLATFORM_FEE_PERCENTAGE")
    @classmethod
    def validate_fee_percentage(cls, v):
        if v < 0 or v > 100:
            raise ValueError("PLATFORM_FEE_PERCENTAGE must be between 0 and 100")
        return v

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        if v > 100:
            raise ValueError("DB_POOL_SIZE should not exceed 100")
        return v

    @field_validator("DB_MAX_OVERFLOW")
    @classmethod
    def validate_max_overflow(cls, v):
        if v < 0:
            raise ValueError("DB_MAX_OVERFLOW must be 0 or greater")
        return v

    @computed_field
    @property
    def database_url(self) -> str:
        """Build the PostgreSQL connection URL"""
        if self.DB_PASSWORD:
            return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        return f"postgresql://{self.DB_USER}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @computed_field
    @property
    def is_development(self) -> bool:
        return self.DEBUG or self.ENVIRONMENT.lower() in ["development", "dev", "local"]

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.OPERATING_TIMEZONE)


# Cached settings instance
_settings_instance = None


def get_settings() -> Settings:
    """
    Return a cached Settings instance.
    Avoids reading the environment more than once.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
