"""Application settings loaded from environment variables."""

from __future__ import annotations

import os
from pathlib import Path


class Settings:
    """Runtime settings for the rota service."""

    @property
    def db_path(self) -> Path:
        return Path(os.environ.get("CLEANING_ROTA_DB_PATH", "./data/cleaning_rota.db"))

    @property
    def api_token(self) -> str:
        return os.environ.get("CLEANING_ROTA_API_TOKEN", "dev-token")

    @property
    def db_url(self) -> str:
        return f"sqlite:///{self.db_path}"

    @property
    def db_timeout(self) -> float:
        return float(os.environ.get("CLEANING_ROTA_DB_TIMEOUT", "5.0"))

    @property
    def harvest_crew_size(self) -> int:
        return max(1, int(os.environ.get("CLEANING_ROTA_HARVEST_CREW_SIZE", "1")))

    @property
    def default_level_code(self) -> str:
        return os.environ.get("CLEANING_ROTA_DEFAULT_LEVEL", "L1")

    @property
    def log_level(self) -> str:
        return os.environ.get("CLEANING_ROTA_LOG_LEVEL", "INFO").upper()


settings = Settings()
