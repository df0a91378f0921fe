"""
Forecasting Module for Cash Flow Risk Engine

Trend, seasonality, market adjustment and risk quantification for
cash flow forecasts.
"""

from .models import (
    TransactionKind,
    TransactionRecord,
    HistoricalPoint,
    RecurringItem,
    PendingInvoiceRef,
    SeasonalPattern,
    MarketSnapshot,
    ForecastBand,
    ForecastPoint,
    ConfidenceInterval,
    MonteCarloResult,
    AccuracyMetrics,
    EnhancedForecast,
    RiskLevel,
    ScenarioAssumptions,
    ForecastInput
)
from .trend_analyzer import (
    TrendAnalyzer,
    TrendResult,
    historical_average,
    trend_factor,
    seasonal_patterns,
    linear_forecast
)
from .recurring_detector import RecurringPatternDetector
from .market_factors import apply_market_factors, market_impact
from .confidence import ConfidenceIntervalCalculator
from .monte_carlo import MonteCarloSimulator
from .accuracy import evaluate, backtest
from .recommendations import generate_recommendations
from .ml_models import ForecastModel, LinearTrendModel, ModelConfig, ModelNotFoundError
from .cash_flow_forecaster import CashFlowForecaster

__all__ = [
    # Data model
    'TransactionKind',
    'TransactionRecord',
    'HistoricalPoint',
    'RecurringItem',
    'PendingInvoiceRef',
    'SeasonalPattern',
    'MarketSnapshot',
    'ForecastBand',
    'ForecastPoint',
    'ConfidenceInterval',
    'MonteCarloResult',
    'AccuracyMetrics',
    'EnhancedForecast',
    'RiskLevel',
    'ScenarioAssumptions',
    'ForecastInput',
    # Components
    'TrendAnalyzer',
    'TrendResult',
    'historical_average',
    'trend_factor',
    'seasonal_patterns',
    'linear_forecast',
    'RecurringPatternDetector',
    'apply_market_factors',
    'market_impact',
    'ConfidenceIntervalCalculator',
    'MonteCarloSimulator',
    'evaluate',
    'backtest',
    'generate_recommendations',
    # Model seam
    'ForecastModel',
    'LinearTrendModel',
    'ModelConfig',
    'ModelNotFoundError',
    # Orchestrator
    'CashFlowForecaster',
]
