# =============================================================================
# AgriManage Backend
# config.py - Configuration Management
#
# Environment-based configuration for development, testing, and production.
# Uses python-dotenv to load environment variables from .env file.
# =============================================================================

import os
from datetime import timedelta
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """
    Base configuration class with default settings.
    All other configuration classes inherit from this.
    """

    # ==========================================================================
    # Flask Core Settings
    # ==========================================================================
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = False
    TESTING = False

    # ==========================================================================
    # Database Configuration
    # ==========================================================================
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URL',
        'sqlite:///agrimanage.db'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # Connection pooling; pool_timeout bounds how long a request waits on the DB
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 10,
        'pool_recycle': 3600,
        'pool_pre_ping': True,
        'max_overflow': 20,
        'pool_timeout': 30
    }

    # ==========================================================================
    # JWT Authentication Configuration
    # ==========================================================================
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'jwt-secret-key-change-in-production')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=1)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=30)
    JWT_TOKEN_LOCATION = ['headers']
    JWT_HEADER_NAME = 'Authorization'
    JWT_HEADER_TYPE = 'Bearer'

    # ==========================================================================
    # Rate Limiting Configuration
    # ==========================================================================
    RATELIMIT_ENABLED = os.getenv('RATELIMIT_ENABLED', 'True').lower() == 'true'
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_STRATEGY = os.getenv('RATELIMIT_STRATEGY', 'fixed-window')
    RATELIMIT_DEFAULT = os.getenv('RATELIMIT_DEFAULT', '200 per hour')
    RATELIMIT_HEADERS_ENABLED = True

    # ==========================================================================
    # CORS Configuration
    # ==========================================================================
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', 'http://localhost:5173').split(',')
    CORS_SUPPORTS_CREDENTIALS = True

    # ==========================================================================
    # Logging
    # ==========================================================================
    LOG_FILE = os.getenv('LOG_FILE', '')
    LOG_MAX_BYTES = int(os.getenv('LOG_MAX_BYTES', 10 * 1024 * 1024))
    LOG_BACKUP_COUNT = int(os.getenv('LOG_BACKUP_COUNT', 5))

    # ==========================================================================
    # Cost Calculator
    # ==========================================================================
    # Optional JSON file overriding the default coefficient table
    COST_TABLE_PATH = os.getenv('COST_TABLE_PATH', '')

    # ==========================================================================
    # Crop Allocation
    # ==========================================================================
    # Reject crops whose area would exceed the parent location's area size
    ENFORCE_CROP_AREA_CAP = os.getenv('ENFORCE_CROP_AREA_CAP', 'False').lower() == 'true'

    # ==========================================================================
    # Seed Data
    # ==========================================================================
    ADMIN_EMAIL = os.getenv('ADMIN_EMAIL', 'admin@agrimanage.com')
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD', 'Admin123!')


class DevelopmentConfig(Config):
    """
    Development configuration with debug mode enabled.
    Uses SQLite database for easy local development.
    """
    DEBUG = True
    SQLALCHEMY_ECHO = True

    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URL',
        'sqlite:///agrimanage_dev.db'
    )

    # Relaxed rate limiting for development
    RATELIMIT_DEFAULT = '1000 per hour'


class TestingConfig(Config):
    """
    Testing configuration for automated tests.
    Uses in-memory SQLite database for fast test execution.
    """
    TESTING = True
    DEBUG = True

    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    # SQLite memory databases use a static pool without sizing options
    SQLALCHEMY_ENGINE_OPTIONS = {}

    JWT_SECRET_KEY = 'testing-jwt-secret-key-with-enough-length'

    # Disable rate limiting during tests
    RATELIMIT_ENABLED = False

    LOG_FILE = ''
    COST_TABLE_PATH = ''
    ENFORCE_CROP_AREA_CAP = False


class ProductionConfig(Config):
    """
    Production configuration with security hardening.
    Requires all secrets to be set via environment variables.
    """
    DEBUG = False
    TESTING = False

    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')

    # Use Redis for rate limiting in production
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL', 'memory://')

    RATELIMIT_DEFAULT = '100 per hour'


# =============================================================================
# Configuration Dictionary
# Maps environment names to configuration classes
# =============================================================================
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(name=None):
    """
    Get the configuration class for an environment name.

    Falls back to the FLASK_ENV environment variable, then to development.

    Returns:
        Config: Configuration class for the environment
    """
    env = name or os.getenv('FLASK_ENV', 'development')
    return config.get(env, config['default'])
