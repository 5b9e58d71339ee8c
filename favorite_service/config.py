"""
Configuration Classes for the Favorite-Number Service.

Centralises environment-dependent settings into a hierarchy of
configuration classes.  The base ``Config`` class defines development
defaults, while subclasses override only what differs per environment.

Key Concepts Demonstrated:
- Class-based configuration with inheritance
- Environment-variable overrides for twelve-factor app compliance
- Separate configuration profiles for development, testing, and production
"""

from __future__ import annotations

import os


class Config:
    """
    Base configuration with development-safe defaults.

    Attributes:
        VALIDATION_LOG_PATH: CSV file that collects one row per rejected
            field.  An empty string disables the log.
    """

    VALIDATION_LOG_PATH: str = os.environ.get("VALIDATION_LOG_PATH", "validation_errors.csv")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """
    Testing environment configuration.

    The validation log is off unless a test opts in with its own path,
    so test runs never write into the working directory.
    """

    DEBUG: bool = True
    TESTING: bool = True
    VALIDATION_LOG_PATH: str = os.environ.get("TEST_VALIDATION_LOG_PATH", "")


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG: bool = False
    TESTING: bool = False


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Look up and return the configuration class for the given environment.

    Args:
        env: Environment name (``"development"``, ``"testing"``,
            ``"production"``).  When ``None``, falls back to the
            ``FLASK_ENV`` environment variable, defaulting to
            ``"development"``.

    Returns:
        The configuration class (not an instance) corresponding to the
        requested environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
