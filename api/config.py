"""
Configuration management for Meal Finder.

This module centralizes environment variable loading from .env file at project root.
It should be imported early in the backend (api/main.py) to ensure .env is loaded
before any other code accesses environment variables.

In production, .env will not exist, but load_dotenv() is safe to call and will no-op.
Platform environment variables will be used instead.

Environment Variables:
- MEALDB_BASE_URL: Optional, defaults to "https://www.themealdb.com/api/json/v1/1"
- MEALDB_TIMEOUT_SECONDS: Optional, per-request timeout (default: 10)
- HOME_RANDOM_COUNT: Optional, random recipes on the home page (default: 6)
- FEATURED_PER_TERM: Optional, results kept per featured search (default: 2)
- DATABASE_URL: Optional, enables SQL-backed client storage and events
- EVENT_LOG_FILE: Optional, JSONL event log path (default: events.log)
- LOG_LEVEL: Optional, logging level (default: INFO)
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv

DEFAULT_MEALDB_BASE_URL = "https://www.themealdb.com/api/json/v1/1"


def load_env_file() -> None:
    """
    Load environment variables from .env file at project root.

    This function locates the project root by going up from this file's location
    (api/config.py -> project root) and loads .env if it exists.

    Safe to call multiple times; existing environment variables take precedence.
    """
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env", override=False)


def configure_logging() -> None:
    """Configure root logging once, with the level taken from LOG_LEVEL."""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Load .env file and configure logging on module import
load_env_file()
configure_logging()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Invalid %s=%r, using %d", name, raw, default)
        return default
    return value if value > 0 else default


class MealDBConfig:
    """Configuration for the TheMealDB connector."""

    @staticmethod
    def get_base_url() -> str:
        """
        Get the TheMealDB API root.

        Returns:
            Base URL string without trailing slash
        """
        return os.getenv("MEALDB_BASE_URL", DEFAULT_MEALDB_BASE_URL).rstrip("/")

    @staticmethod
    def get_timeout_seconds() -> float:
        raw = os.getenv("MEALDB_TIMEOUT_SECONDS")
        try:
            return float(raw) if raw else 10.0
        except ValueError:
            return 10.0


class HomeConfig:
    """Configuration for the home page sections."""

    @staticmethod
    def get_random_count() -> int:
        return _int_env("HOME_RANDOM_COUNT", 6)

    @staticmethod
    def get_featured_per_term() -> int:
        return _int_env("FEATURED_PER_TERM", 2)


class StorageConfig:
    """Configuration for client storage persistence."""

    @staticmethod
    def get_database_url() -> str:
        """
        Get the database URL.

        Returns:
            DATABASE_URL, or "" when storage is in-memory
        """
        return os.getenv("DATABASE_URL", "")


def get_config_status() -> Dict[str, Any]:
    """
    Summarize the effective configuration (no secrets).

    Returns:
        Dictionary with keys:
        - mealdb_base_url: str
        - home_random_count: int
        - featured_per_term: int
        - database_configured: bool
    """
    return {
        "mealdb_base_url": MealDBConfig.get_base_url(),
        "home_random_count": HomeConfig.get_random_count(),
        "featured_per_term": HomeConfig.get_featured_per_term(),
        "database_configured": bool(StorageConfig.get_database_url()),
    }
