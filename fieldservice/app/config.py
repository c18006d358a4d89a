"""
Application settings.

Values come from environment variables; a ``.env`` file in the working
directory is loaded first if present. ``create_app`` accepts its own
``Settings`` instance, which is what the tests use.
"""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class Settings:
    """Settings loaded from environment variables at instantiation time."""

    project_name: str = field(default_factory=lambda: os.getenv("PROJECT_NAME", "Field Service Scheduling API"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    cors_origins: List[str] = field(
        default_factory=lambda: _env_list(
            "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173,http://127.0.0.1:5173"
        )
    )
    # log a business event for each tracked API call
    telemetry_enabled: bool = field(default_factory=lambda: _env_bool("TELEMETRY_ENABLED", "true"))
    # upper bound for /service-dates/upcoming
    max_upcoming_dates: int = field(default_factory=lambda: int(os.getenv("MAX_UPCOMING_DATES", "52")))


settings = Settings()
