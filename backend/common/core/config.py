from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.core.constants import (
    Environment,
    PAYLINK_PRODUCTION_BASE_URL,
    PAYLINK_SANDBOX_BASE_URL,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment Profile
    environment: Environment = Environment.LOCAL

    # API Settings
    app_name: str = "WhatsApp Bot Payments"
    api_version: str = "1.0.0"
    debug: bool = False

    # Database Components
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "whatsapp_bot"
    db_use_nullpool: bool = False
    db_pool_size: int = 10
    db_pool_overflow: int = 5

    @property
    def database_url(self) -> str:
        """Construct database URL from components."""
        return f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # OpenTelemetry
    otel_service_name: str = "whatsapp-bot-payments"
    otel_service_version: str = "1.0.0"

    # Axiom (exporters are only attached when a token is present)
    axiom_token: Optional[str] = None
    axiom_dataset: Optional[str] = None

    # Auth (JWT issued by the dashboard login flow)
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"

    # Rate limiting
    rate_limit_storage_uri: str = "memory://"
    checkout_rate_limit: str = "10/minute"

    # Client-facing app
    app_base_url: Optional[str] = None  # Falls back to the request host
    payment_status_path: str = "/dashboard/client/subscriptions/payment-status"
    payment_intent_ttl_minutes: int = 60

    # Paylink gateway
    paylink_api_id: Optional[str] = None
    paylink_secret_key: Optional[str] = None
    paylink_production: bool = False
    paylink_base_url: Optional[str] = None  # Overrides the sandbox/production default
    paylink_alternate_base_url: Optional[str] = None
    paylink_currency: str = "SAR"
    paylink_callback_url: Optional[str] = None
    paylink_timeout_seconds: float = 15.0
    paylink_token_ttl_seconds: int = 30 * 60
    paylink_persist_token: bool = False
    paylink_debug: bool = False

    @property
    def paylink_primary_base_url(self) -> str:
        """Auto-select the gateway host based on the production flag."""
        if self.paylink_base_url:
            return self.paylink_base_url.rstrip("/")
        return (
            PAYLINK_PRODUCTION_BASE_URL
            if self.paylink_production
            else PAYLINK_SANDBOX_BASE_URL
        )

    @property
    def paylink_fallback_base_url(self) -> str:
        """Alternate host used when the primary endpoint profile fails."""
        if self.paylink_alternate_base_url:
            return self.paylink_alternate_base_url.rstrip("/")
        return self.paylink_primary_base_url

    @property
    def paylink_configured(self) -> bool:
        return bool(self.paylink_api_id and self.paylink_secret_key)

    @property
    def cors_allowed_origins(self) -> List[str]:
        """Auto-select CORS origins based on environment."""
        if self.environment == Environment.LOCAL:
            return [
                "http://localhost:3000",
                "http://localhost:3001",
            ]
        origins = []
        if self.app_base_url:
            origins.append(self.app_base_url.rstrip("/"))
        return origins


settings = Settings()
