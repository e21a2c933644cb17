import os
import urllib.parse
from datetime import timedelta

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _database_uri():
    """PostgreSQL when DB_HOST is configured, otherwise DATABASE_URL or a local SQLite file"""
    db_host = os.environ.get('DB_HOST')
    if db_host:
        db_user = os.environ.get('DB_USER', '')
        db_password = urllib.parse.quote_plus(os.environ.get('DB_PASSWORD', ''))
        db_port = os.environ.get('DB_PORT', '5432')
        db_name = os.environ.get('DB_NAME', '')
        return f'postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}'
    return os.environ.get('DATABASE_URL') or f"sqlite:///{os.path.join(BASE_DIR, 'credit_tracker.db')}"


class Config:
    """Application settings"""

    # Security
    SECRET_KEY = os.environ.get('FLASK_SECRET_KEY')
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = os.environ.get('FLASK_ENV') == 'production'
    SESSION_LIFETIME_DAYS = int(os.environ.get('SESSION_LIFETIME_DAYS', 7))
    PERMANENT_SESSION_LIFETIME = timedelta(days=SESSION_LIFETIME_DAYS)

    # Database
    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Background jobs
    SCHEDULER_TIMEZONE = os.environ.get('SCHEDULER_TIMEZONE', 'Asia/Bangkok')
    SESSION_PURGE_MINUTES = int(os.environ.get('SESSION_PURGE_MINUTES', 60))

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Server
    HOST = '0.0.0.0'
    PORT = int(os.environ.get('PORT', 5000))
    DEBUG = os.environ.get('FLASK_ENV') == 'development'


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SESSION_COOKIE_SECURE = False
