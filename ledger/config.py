"""Application configuration via environment variables."""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Firebase RTDB base URL, or an SQLAlchemy URL (sqlite:///..., postgresql://...)
    store_url: str = "http://127.0.0.1:9000"  # Firebase emulator default port
    store_collection: str = "trades"
    store_timeout: float | None = None  # seconds; None leaves requests unbounded
    default_market: Literal["TW", "US", "UK"] = "TW"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173"]  # Vite dev server

    model_config = {"env_prefix": "LEDGER_", "env_file": ".env"}


settings = Settings()
