"""
Database Module for Cash Flow Risk Engine

SQLAlchemy models and SQL-backed ledger, market data and forecast store.
"""

from .models import (
    db,
    Transaction,
    Invoice,
    MarketIndicator,
    CashFlowForecast
)
from .repositories import SqlLedger, SqlMarketDataProvider, SqlForecastSink
from .app import create_app, init_db

__all__ = [
    'db',
    'Transaction',
    'Invoice',
    'MarketIndicator',
    'CashFlowForecast',
    'SqlLedger',
    'SqlMarketDataProvider',
    'SqlForecastSink',
    'create_app',
    'init_db',
]
