"""
Configuration settings for the school results system
"""

import os
from datetime import timedelta


class Config:
    """Base configuration class"""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'school-results-secret-key-change-me'

    # Database settings
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///school_results.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session settings
    PERMANENT_SESSION_LIFETIME = timedelta(hours=2)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Report settings
    SCHOOL_NAME = os.environ.get('SCHOOL_NAME') or 'School Results'
    REPORT_CONCURRENT_FETCH = True  # Fetch marks and attendance in parallel
    REPORT_TOP_N = 10
    DEFAULT_RANKING_METHOD = 'totalMarks'

    # Security settings
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = None


class TestingConfig(Config):
    """Configuration used by the test suite"""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    WTF_CSRF_ENABLED = False
    REPORT_CONCURRENT_FETCH = False
    LOG_LEVEL = 'WARNING'
