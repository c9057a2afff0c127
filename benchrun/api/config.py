"""Deployment settings for the API layer."""
from __future__ import annotations

from pydantic_settings import BaseSettings

from .. import config as _cfg


class ApiSettings(BaseSettings):
    """Immutable settings loaded from environment / .env file."""

    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: str = "http://localhost:5173,http://localhost:8000"
    history_db_path: str = _cfg.HISTORY_DB_PATH
    results_dir: str = str(_cfg.RESULTS_DIR)
    log_level: str = _cfg.LOG_LEVEL
    log_format: str = _cfg.LOG_FORMAT
    increment_seconds: float = _cfg.INCREMENT_SECONDS
    timer_interval_seconds: float = _cfg.TIMER_INTERVAL_SECONDS

    model_config = {"env_prefix": "BENCHRUN_API_", "env_file": ".env", "extra": "ignore"}
