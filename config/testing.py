"""
Testing configuration for the print shop backend
"""
import os
from datetime import timedelta

from config.settings import Config


class TestingConfig(Config):
    """Testing configuration with isolated database and safe defaults"""

    TESTING = True
    DEBUG = False

    # Use in-memory SQLite for fast tests
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'TEST_DATABASE_URL',
        'sqlite:///:memory:'
    )
    SQLALCHEMY_ENGINE_OPTIONS = {}

    SECRET_KEY = 'test-secret-key'
    JWT_SECRET_KEY = 'test-jwt-secret'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)

    # Disable rate limiting in tests
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = 'memory://'

    # Overridden per test with a temporary directory
    UPLOAD_FOLDER = '/tmp/printshop_test_uploads'
    MAX_UPLOAD_SIZE = 10 * 1024 * 1024

    MEMBER_AUTO_CREATE = True
    AUTO_CREATED_MEMBER_STATUS = 'approved'
    ORDER_REQUIRE_FILES = False

    # Logging
    LOG_LEVEL = 'WARNING'
    SENTRY_DSN = None

    CORS_ORIGINS = ['http://localhost:5173', 'http://localhost:3000']
