"""Base configuration shared by every environment."""
import os

class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # Public URL of the web client; check-in links point here
    APP_URL = os.environ.get('APP_URL') or 'http://localhost:3000'

    # QR check-in
    QR_DEFAULT_EXPIRES_MINUTES = 60
    QR_MAX_EXPIRES_MINUTES = 1440  # 24 hours
    QR_DEFAULT_LATE_AFTER_MINUTES = 15
    QR_MAX_LATE_AFTER_MINUTES = 1440
    # Manually entered statuses a student scan is allowed to replace
    QR_OVERWRITABLE_STATUSES = ('absent', 'excused')

    # Grading
    GRADE_MAX_SCORE = 100
    GRADE_PASSING_SCORE = 75

    # CORS
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'http://localhost:3000').split(',')

    # Rate Limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL') or 'memory://'

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE') or 'logs/app.log'
