"""
Development environment configuration module.
"""
from fleetsub.config.base_config import BaseConfig


class DevelopmentConfig(BaseConfig):
    """Development environment configuration class."""

    DEBUG = True
    SQLALCHEMY_ECHO = True  # Log SQL queries
    LOG_LEVEL = "DEBUG"

    DB_NAME = "fleet_dev_db"
    SQLALCHEMY_DATABASE_URI = "mysql+pymysql://user:password@db:3306/fleet_dev_db"

    JWT_ACCESS_TOKEN_EXPIRES = 86400  # 24 hours
