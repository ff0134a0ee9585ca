"""
FotoEstudio settings, one class per environment.

Values come from the environment (loaded from .env by app.py) with local
development defaults.
"""

import os
from datetime import timedelta


class Config:
    """Settings shared by every environment."""

    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # SQLite file holding agenda, bookings, payments and catalogs
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or 'instance/fotoestudio.db'

    # Session cookie and CSRF token for the logged-in back-office
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = 3600
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False
    PERMANENT_SESSION_LIFETIME = timedelta(
        hours=int(os.environ.get('SESSION_TIMEOUT_HOURS', 8))
    )

    # Studio local time; "today" on the agenda grid depends on it
    TIMEZONE = os.environ.get('TIMEZONE') or 'America/Guatemala'

    # Working hours given to a day saved without start/end
    AGENDA_DEFAULT_START = os.environ.get('AGENDA_DEFAULT_START') or '08:00'
    AGENDA_DEFAULT_END = os.environ.get('AGENDA_DEFAULT_END') or '17:00'

    APP_NAME = 'FotoEstudio'
    APP_VERSION = '1.0.0'


class DevelopmentConfig(Config):
    DEBUG = True
    TESTING = False
    SESSION_COOKIE_SECURE = False
    WTF_CSRF_SSL_STRICT = False


class ProductionConfig(Config):
    """Served behind HTTPS by gunicorn (see wsgi.py)."""

    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'true').lower() == 'true'
    WTF_CSRF_SSL_STRICT = SESSION_COOKIE_SECURE

    SECRET_KEY = os.environ.get('SECRET_KEY') or Config.SECRET_KEY
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or Config.DATABASE_PATH

    PREFERRED_URL_SCHEME = 'https' if SESSION_COOKIE_SECURE else 'http'

    @classmethod
    def validate(cls) -> None:
        """
        Refuse to start the studio server with development secrets.

        Raises:
            ValueError: If SECRET_KEY is missing or short, or DATABASE_PATH is unset
        """
        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        if len(secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters in production")
        if not os.environ.get('DATABASE_PATH'):
            raise ValueError("DATABASE_PATH environment variable must be set in production")


class TestConfig(Config):
    TESTING = True
    DEBUG = True
    WTF_CSRF_ENABLED = False
    DATABASE_PATH = os.environ.get('DATABASE_PATH', 'instance/fotoestudio_test.db')
    SECRET_KEY = 'test-secret-key'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'test': TestConfig,
    'default': DevelopmentConfig
}
