"""
Centralized Configuration for SiteBook
Manages environment-specific settings for the sync gateway and its storage.
"""
import os


def _normalize_database_url(url):
    """Handle Render/Heroku's postgres:// vs postgresql:// URL format"""
    if url and url.startswith('postgres://'):
        return url.replace('postgres://', 'postgresql://', 1)
    return url


class Config:
    """Base configuration with defaults"""

    # Flask Settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or os.urandom(32).hex()
    # Task photos and invoice scans travel inline as base64 blobs
    MAX_CONTENT_LENGTH = 25 * 1024 * 1024

    # API Settings
    API_PREFIX = '/api'

    # CORS Settings
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')
    CORS_METHODS = ['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS']
    CORS_ALLOW_HEADERS = ['Content-Type', 'Authorization', 'X-Requested-With', 'X-Organization-Id', 'X-User-Id']

    # Database Settings
    DATABASE_URL = _normalize_database_url(os.environ.get('DATABASE_URL', 'sqlite:///sitebook.db'))
    SQLALCHEMY_ECHO = os.environ.get('SQLALCHEMY_ECHO', 'false').lower() == 'true'
    AUTO_CREATE_TABLES = os.environ.get('AUTO_CREATE_TABLES', 'true').lower() == 'true'
    SEED_DEMO_DATA = os.environ.get('SEED_DEMO_DATA', 'false').lower() == 'true'

    # Internal tool: storage failures are surfaced with their trace
    EXPOSE_ERROR_TRACE = os.environ.get('EXPOSE_ERROR_TRACE', 'true').lower() == 'true'

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    LOG_FILE = os.environ.get('LOG_FILE', 'sitebook.log')
    LOG_TO_FILE = os.environ.get('LOG_TO_FILE', 'true').lower() == 'true'


class DevelopmentConfig(Config):
    """Development-specific configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = 'DEBUG'
    CORS_ORIGINS = ['*']


class ProductionConfig(Config):
    """Production-specific configuration"""
    DEBUG = False
    TESTING = False
    AUTO_CREATE_TABLES = os.environ.get('AUTO_CREATE_TABLES', 'false').lower() == 'true'
    PREFERRED_URL_SCHEME = 'https'


class TestingConfig(Config):
    """Testing-specific configuration"""
    DEBUG = True
    TESTING = True
    DATABASE_URL = 'sqlite://'
    AUTO_CREATE_TABLES = True
    SEED_DEMO_DATA = False
    LOG_TO_FILE = False


# Configuration selector
config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}


def get_config():
    """Get configuration based on FLASK_ENV environment variable"""
    env = os.environ.get('FLASK_ENV', 'development')
    return config_by_name.get(env, DevelopmentConfig)
