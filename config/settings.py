"""
Configuration settings for different environments
"""
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def _database_url():
    """Resolve the record store URL, fixing Heroku-style postgres:// URLs."""
    url = os.environ.get('DATABASE_URL', '')
    if url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url or 'sqlite:///printshop.db'


def _extension_set(value):
    return {ext.strip().lower().lstrip('.') for ext in value.split(',') if ext.strip()}


class Config:
    """Base configuration"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database
    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
    }

    # CORS
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')

    # File uploads
    MAX_CONTENT_LENGTH = 64 * 1024 * 1024  # whole request, several files
    MAX_UPLOAD_SIZE = int(os.environ.get('MAX_UPLOAD_SIZE', 10 * 1024 * 1024))  # 10MB per file
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(os.getcwd(), 'uploads')
    UPLOAD_URL_PREFIX = '/uploads'
    # Empty set accepts every file type
    ALLOWED_UPLOAD_EXTENSIONS = _extension_set(
        os.environ.get('ALLOWED_UPLOAD_EXTENSIONS', 'jpg,jpeg,png,pdf,doc,docx')
    )

    # Identifier allocation
    ID_ALLOCATION_ATTEMPTS = int(os.environ.get('ID_ALLOCATION_ATTEMPTS', 5))

    # Order workflow policy
    MEMBER_AUTO_CREATE = os.environ.get('MEMBER_AUTO_CREATE', 'true').lower() in ['true', 'on', '1']
    AUTO_CREATED_MEMBER_STATUS = os.environ.get('AUTO_CREATED_MEMBER_STATUS', 'approved')
    ORDER_REQUIRE_FILES = os.environ.get('ORDER_REQUIRE_FILES', 'false').lower() in ['true', 'on', '1']

    # Admin tokens
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or SECRET_KEY
    JWT_ALGORITHM = 'HS256'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=8)

    # Rate limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL') or 'memory://'
    LOGIN_RATE_LIMIT = os.environ.get('LOGIN_RATE_LIMIT', '10 per minute')

    # Logging / monitoring
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    SENTRY_DSN = os.environ.get('SENTRY_DSN')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 10,
        'max_overflow': 20,
        'pool_recycle': 3600,
        'pool_pre_ping': True,
    }
