from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        ...,
        min_length=1,
        description="SQLAlchemy async connection string (postgresql+asyncpg://...)",
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements",
    )
    database_pool_size: int = Field(
        default=5,
        description="Connection pool size",
    )
    database_max_overflow: int = Field(
        default=10,
        description="Connections allowed above pool size",
    )

    # Payment provider selection
    payment_provider: Literal["razorpay_qr", "razorpay_link", "mock"] = Field(
        default="razorpay_qr",
        description="Artifact gateway to use",
    )

    # Razorpay settings
    razorpay_key_id: str = Field(
        default="",
        description="Razorpay API key id",
    )
    razorpay_key_secret: str = Field(
        default="",
        description="Razorpay API key secret",
    )
    razorpay_base_url: str = Field(
        default="https://api.razorpay.com/v1",
        description="Razorpay REST API base URL",
    )

    # Artifact parameters
    merchant_name: str = Field(
        default="Flutter App Payment",
        description="Name shown on the QR code",
    )
    payment_description: str = Field(
        default="App Transaction",
        max_length=255,
        description="Description attached to every artifact",
    )
    currency: str = Field(
        default="INR",
        min_length=3,
        max_length=3,
        description="ISO currency code for payment links",
    )
    qr_code_ttl_seconds: int = Field(
        default=300,
        gt=0,
        description="Seconds until a QR code closes",
    )
    payment_link_ttl_seconds: int = Field(
        default=900,
        ge=900,
        description="Seconds until a payment link expires (processor minimum is 15 minutes)",
    )
    max_amount: Decimal = Field(
        default=Decimal("500000"),
        gt=0,
        description="Largest amount accepted for a single session",
    )

    # Webhooks
    webhook_secret: str = Field(
        ...,
        min_length=1,
        description="Shared secret for webhook signature verification",
    )
    webhook_base_url: str = Field(
        default="http://localhost:8000",
        description="Public base URL of this service (mock provider callbacks)",
    )

    # Timeouts
    gateway_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for payment processor calls",
    )
    store_timeout_seconds: float = Field(
        default=3.0,
        gt=0,
        description="Timeout for session store operations",
    )

    # History
    history_default_limit: int = Field(
        default=20,
        ge=1,
        description="Sessions returned by /orders when no limit is given",
    )
    history_max_limit: int = Field(
        default=50,
        ge=1,
        description="Upper bound for /orders limit",
    )

    # CORS
    cors_allow_origins: list[str] = Field(
        default=["*"],
        description="Origins allowed by CORS middleware",
    )

    # Rate limiting
    rate_limit_calls: int = Field(
        default=100,
        description="Max API calls per period",
    )
    rate_limit_period: int = Field(
        default=60,
        description="Rate limit period in seconds",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_format: Literal["json", "standard"] = Field(
        default="standard",
        description="Log format (json for production, standard for dev)",
    )

    @model_validator(mode="after")
    def check_provider_credentials(self) -> "Settings":
        if self.payment_provider.startswith("razorpay") and not (
            self.razorpay_key_id and self.razorpay_key_secret
        ):
            raise ValueError(
                "RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET are required "
                f"for payment_provider={self.payment_provider}"
            )
        if self.history_default_limit > self.history_max_limit:
            raise ValueError("history_default_limit must not exceed history_max_limit")
        return self


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
