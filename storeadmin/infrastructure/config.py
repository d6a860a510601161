"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Console settings loaded from ``STOREADMIN_*`` environment variables."""

    # Remote catalog API
    api_base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the product API",
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Transport timeout for every gateway request, in seconds",
    )

    # Stand-alone mode (no remote, local state is authoritative)
    standalone_mode: bool = False
    seed_file: Path | None = Field(
        default=None,
        description="JSON fixture with a 'products' array for stand-alone mode",
    )

    # Catalog
    default_min_stock: int = Field(default=10, ge=0)
    low_stock_alert_enabled: bool = True

    # Product images
    image_max_bytes: int = Field(default=2 * 1024 * 1024, gt=0)
    image_allowed_types: tuple[str, ...] = ("image/jpeg", "image/png")

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {
        "env_prefix": "STOREADMIN_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
