"""Application settings read from the environment."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from .enums import FifoMode

# Default SQLite location, next to the repository root
DEFAULT_DB_PATH = Path(__file__).parent.parent.parent / "data" / "wealth_tax.db"


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    """Runtime configuration."""
    database_url: str = f"sqlite:///{DEFAULT_DB_PATH}"
    cors_origins: list[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )
    log_level: str = "INFO"
    fifo_mode: FifoMode = FifoMode.DRAIN_ALL_SALES


def get_settings() -> Settings:
    """Build settings from environment variables, falling back to defaults."""
    defaults = Settings()
    origins = os.getenv("WEALTH_TAX_CORS_ORIGINS")
    return Settings(
        database_url=os.getenv("WEALTH_TAX_DATABASE_URL", defaults.database_url),
        cors_origins=_split_origins(origins) if origins else defaults.cors_origins,
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        fifo_mode=FifoMode(os.getenv("WEALTH_TAX_FIFO_MODE", defaults.fifo_mode.value)),
    )
