"""
Data Module for Cash Flow Risk Engine

Input validation, history aggregation and the collaborator interfaces
the forecasting engine reads from and writes to.
"""

from .validation import ValidationError, parse_historical_points, parse_transactions
from .providers import (
    LedgerProvider,
    MarketDataProvider,
    ForecastSink,
    InMemoryLedger,
    StaticMarketDataProvider,
    InMemoryForecastSink,
    FredMarketDataProvider,
    MarketDataError
)
from .aggregator import (
    HistoricalDataAggregator,
    PaymentDatePredictor,
    apply_scenario_assumptions
)

__all__ = [
    'ValidationError',
    'parse_historical_points',
    'parse_transactions',
    'LedgerProvider',
    'MarketDataProvider',
    'ForecastSink',
    'InMemoryLedger',
    'StaticMarketDataProvider',
    'InMemoryForecastSink',
    'FredMarketDataProvider',
    'MarketDataError',
    'HistoricalDataAggregator',
    'PaymentDatePredictor',
    'apply_scenario_assumptions',
]
