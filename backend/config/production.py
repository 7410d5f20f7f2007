"""Production configuration."""
import os

from .base import Config

class ProductionConfig(Config):
    """Production configuration class."""

    DEBUG = False
    TESTING = False
    SECRET_KEY = os.getenv('SECRET_KEY')  # Must be set in production

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True}

    # Redis (required in production for shared rate limits)
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

    # Enhanced security
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    LOG_LEVEL = 'INFO'
    LOG_FILE = os.getenv('LOG_FILE') or '/app/logs/app.log'
