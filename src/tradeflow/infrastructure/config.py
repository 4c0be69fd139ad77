"""Runtime settings, read from ``TRADEFLOW_*`` environment variables or ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root when installed in editable mode.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TRADEFLOW_",
        env_file=".env",
        extra="ignore",
    )

    data_dir: Path = _DEFAULT_DATA_DIR
    environment: Literal["production", "development"] = "production"
    log_level: str = "INFO"
    lock_timeout_seconds: float = 10.0
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def orders_file(self) -> Path:
        return self.data_dir / "orders.json"

    @property
    def products_file(self) -> Path:
        return self.data_dir / "products.json"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
