"""Application configuration."""
from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str

    # Admin
    admin_password: str

    # Store
    store_name: str = "Tea POS"
    currency_symbol: str = "$"
    tax_rate: Decimal = Decimal("0.08")  # differs per deployment, e.g. 0.08875

    # Checkout
    checkout_timeout_seconds: float = 15.0

    # Local state
    cart_storage_dir: str = ".pos_state"
    catalog_defaults_file: Optional[str] = None

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
