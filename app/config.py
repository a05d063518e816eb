"""
Application configuration
"""
import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _get_env_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default)).strip()
    try:
        return int(raw)
    except ValueError:
        return default


class Settings:
    """Settings read from environment variables (.env supported)"""

    # Database file (SQLite)
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "tournament.db")

    # Comma-separated extra CORS origins
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Match defaults
    DEFAULT_TOTAL_OVERS: int = _get_env_int("DEFAULT_TOTAL_OVERS", 20)

    # Simulator
    SIMULATION_MAX_DELIVERIES: int = _get_env_int("SIMULATION_MAX_DELIVERIES", 1000)
    SIMULATION_SEED: Optional[int] = (
        _get_env_int("SIMULATION_SEED", 0) if os.getenv("SIMULATION_SEED") else None
    )

    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.DATABASE_PATH}"


settings = Settings()
