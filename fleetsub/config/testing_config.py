"""
Testing environment configuration module.
"""
import os

from fleetsub.config.base_config import BaseConfig


class TestingConfig(BaseConfig):
    """Testing environment configuration class."""

    TESTING = True
    DEBUG = True
    LOG_LEVEL = "WARNING"

    # In-memory SQLite unless a real test database is provided
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URI", "sqlite://")
    SQLALCHEMY_ECHO = False

    JWT_ACCESS_TOKEN_EXPIRES = 300  # 5 minutes
    JWT_REFRESH_TOKEN_EXPIRES = 1800  # 30 minutes
    JWT_SECRET_KEY = "test-jwt-secret-key-for-testing-only"
