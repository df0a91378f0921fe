"""
Cash Flow Risk Engine

Forecasts future cash position from transaction history and quantifies
the uncertainty of that forecast.
"""

from .forecasting import CashFlowForecaster, EnhancedForecast, ScenarioAssumptions
from .data import ValidationError

__version__ = "0.1.0"

__all__ = [
    'CashFlowForecaster',
    'EnhancedForecast',
    'ScenarioAssumptions',
    'ValidationError',
]
