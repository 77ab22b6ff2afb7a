"""
Base configuration module with common settings.
"""
import os

from fleetsub.config.plans import PLAN_DEFINITIONS


class BaseConfig:
    """Base configuration class with common settings."""

    # Flask settings
    SECRET_KEY = os.getenv("SECRET_KEY", "default-dev-key-not-for-production")
    DEBUG = False
    TESTING = False
    # Let Flask-JWT-Extended errors reach their handlers through Flask-RESTX
    PROPAGATE_EXCEPTIONS = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Database settings
    DB_USER = os.getenv("DB_USER", "user")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "password")
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "3306")
    DB_NAME = os.getenv("DB_NAME", "fleet_db")
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "SQLALCHEMY_DATABASE_URI",
        f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT settings
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "default-jwt-key-not-for-production")
    JWT_ACCESS_TOKEN_EXPIRES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES", 604800))  # 7 days
    JWT_REFRESH_TOKEN_EXPIRES = int(os.getenv("JWT_REFRESH_TOKEN_EXPIRES", 2592000))  # 30 days
    JWT_ERROR_MESSAGE_KEY = "message"

    # API settings
    API_TITLE = "Fleet Subscription API"
    API_VERSION = "1.0"
    API_DESCRIPTION = "Driver fleet management with plan-based entitlements"

    # Subscription settings
    SUBSCRIPTION_PLANS = PLAN_DEFINITIONS
    DEFAULT_PLAN = "starter"

    # Advisory cache hints for read endpoints
    PLANS_CACHE_CONTROL = "public, max-age=3600, s-maxage=3600, stale-while-revalidate=86400"
    SUBSCRIPTION_CACHE_CONTROL = "private, max-age=30"
    LIMITS_CACHE_CONTROL = "private, max-age=30"
    USAGE_CACHE_CONTROL = "private, max-age=15"
