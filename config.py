"""
Application configuration module.

This module defines configuration classes for different environments
(development, testing, production). Configuration values are loaded
from environment variables with sensible defaults.
"""

import os
from pathlib import Path

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent


class Config:
    """Base configuration with default settings."""

    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    # Default database location
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'tasks.db'}"
    )

    # Task listing
    TASKS_PER_PAGE: int = int(os.environ.get("TASKS_PER_PAGE", "10"))
    TASK_CACHE_TTL: int = int(os.environ.get("TASK_CACHE_TTL", "3600"))
    TASK_CACHE_MAX_ENTRIES: int = int(os.environ.get("TASK_CACHE_MAX_ENTRIES", "1000"))

    # Client settings (used by taskboard.client)
    TASK_API_URL: str = os.environ.get("TASK_API_URL", "http://localhost:5000/api/v1")
    TASK_API_TIMEOUT: int = int(os.environ.get("TASK_API_TIMEOUT", "5"))
    SEARCH_DEBOUNCE_SECONDS: float = float(os.environ.get("SEARCH_DEBOUNCE_SECONDS", "0.3"))


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """Testing environment configuration."""

    DEBUG: bool = True
    TESTING: bool = True

    # Use separate test database with check_same_thread=False for multi-threaded access
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "TEST_DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'test_tasks.db'}?check_same_thread=False"
    )

    # SQLAlchemy engine options for thread safety
    SQLALCHEMY_ENGINE_OPTIONS: dict = {
        "pool_pre_ping": True,
    }

    TASK_API_URL: str = os.environ.get("TEST_TASK_API_URL", "http://task-api/api/v1")
    TASK_API_TIMEOUT: int = int(os.environ.get("TEST_TASK_API_TIMEOUT", "1"))
    SEARCH_DEBOUNCE_SECONDS: float = 0.01


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG: bool = False
    TESTING: bool = False


# Configuration mapping for easy access
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (development, testing, production).
             If None, uses FLASK_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
