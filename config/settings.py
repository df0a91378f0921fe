"""
Configuration settings for the Cash Flow Risk Engine
"""

import os


def _env_int(name, default):
    value = os.environ.get(name)
    return int(value) if value else default


def _env_float(name, default):
    value = os.environ.get(name)
    return float(value) if value else default


class Config:
    """Base configuration"""
    # App
    APP_NAME = "Cash Flow Risk Engine"
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        'sqlite:///cash_flow_risk.db'
    )
    # Fix for Heroku/Render style PostgreSQL URLs
    if SQLALCHEMY_DATABASE_URI and SQLALCHEMY_DATABASE_URI.startswith('postgres://'):
        SQLALCHEMY_DATABASE_URI = SQLALCHEMY_DATABASE_URI.replace('postgres://', 'postgresql://', 1)

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }

    # Forecast defaults
    DEFAULT_HORIZON_MONTHS = _env_int('FORECAST_HORIZON_MONTHS', 12)
    DEFAULT_CONFIDENCE_LEVEL = _env_float('FORECAST_CONFIDENCE_LEVEL', 0.95)
    LOOKBACK_MONTHS = _env_int('FORECAST_LOOKBACK_MONTHS', 24)

    # Monte Carlo
    MONTE_CARLO_SIMULATIONS = _env_int('MONTE_CARLO_SIMULATIONS', 10000)
    MONTE_CARLO_SEED = _env_int('MONTE_CARLO_SEED', None)
    MONTE_CARLO_WORKERS = _env_int('MONTE_CARLO_WORKERS', 1)
    MONTE_CARLO_TIME_BUDGET = _env_float('MONTE_CARLO_TIME_BUDGET', None)  # seconds

    # Market data (FRED)
    FRED_API_KEY = os.environ.get('FRED_API_KEY')
    FRED_BASE_URL = os.environ.get(
        'FRED_BASE_URL',
        'https://api.stlouisfed.org/fred/series/observations'
    )
    MARKET_DATA_TIMEOUT = _env_float('MARKET_DATA_TIMEOUT', 10.0)


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        'sqlite:///cash_flow_risk_dev.db'
    )
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    # Interactive runs must return within the request budget
    MONTE_CARLO_TIME_BUDGET = _env_float('MONTE_CARLO_TIME_BUDGET', 5.0)
    MONTE_CARLO_WORKERS = _env_int('MONTE_CARLO_WORKERS', 4)


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    MONTE_CARLO_SIMULATIONS = 1000
    MONTE_CARLO_SEED = 42
    MONTE_CARLO_WORKERS = 1
    MONTE_CARLO_TIME_BUDGET = None
    FRED_API_KEY = None


# Config mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config():
    """Get config based on environment"""
    env = os.environ.get('CASHFLOW_ENV', 'development')
    return config.get(env, config['default'])
