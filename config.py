import os
from datetime import timedelta


class Config:
    """Base configuration"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///auction.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PERMANENT_SESSION_LIFETIME = timedelta(hours=12)

    # Admin credentials - ADMIN_PASSWORD_HASH (bcrypt) wins over ADMIN_PASSWORD
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME') or 'admin'
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD')
    ADMIN_PASSWORD_HASH = os.environ.get('ADMIN_PASSWORD_HASH')

    # Auction settings
    MIN_BID_INCREMENT = 100
    UNSOLD_PRICE_REDUCTION = 0.5  # Replay round floor = base price * factor
    DEFAULT_WALLET = 10000
    DEFAULT_BASE_PRICE = 1000
    DEFAULT_AUCTION_DATE = '2025-04-29T09:00:00'
    ALLOW_SELF_RAISE = True  # A team may raise its own standing bid

    # Import settings
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024  # 5 MB roster files

    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI') or 'memory://'

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
    LOG_JSON = False


class DevelopmentConfig(Config):
    DEBUG = True
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD') or 'admin'


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'test-password'
    ADMIN_PASSWORD_HASH = None
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    LOG_LEVEL = 'WARNING'


class ProductionConfig(Config):
    DEBUG = False
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    LOG_JSON = True  # Structured logs for aggregation


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig,
}
