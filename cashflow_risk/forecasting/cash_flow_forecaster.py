"""
Cash Flow Forecaster

Orchestrates the forecasting engine: point forecasts, market adjustment,
confidence bands, Monte Carlo risk simulation, backtested accuracy and
recommendations, plus the monthly income/expense scenario forecast.
"""

import logging
from datetime import date
from typing import Dict, List, Any, Optional, Sequence

from .accuracy import backtest
from .confidence import (
    ConfidenceIntervalCalculator, calculate_returns, calculate_volatility,
    mean_return, z_score
)
from .market_factors import apply_market_factors, latest_snapshot, market_impact
from .ml_models import ForecastModel
from .models import (
    EnhancedForecast, ForecastBand, ForecastInput, ForecastPoint,
    MarketSnapshot, PendingInvoiceRef, RiskAdjustment, ScenarioAssumptions,
    TransactionKind
)
from .monte_carlo import MonteCarloSimulator
from .recommendations import generate_recommendations
from .trend_analyzer import (
    TrendAnalyzer, historical_average, linear_forecast, seasonal_factor,
    seasonal_patterns, trend_factor
)
from ..data.aggregator import (
    HistoricalDataAggregator, PaymentDatePredictor, add_months,
    apply_scenario_assumptions
)
from ..data.providers import (
    FredMarketDataProvider, ForecastSink, LedgerProvider, MarketDataProvider
)
from ..data.validation import parse_historical_points

logger = logging.getLogger(__name__)

PIPELINE_STAGES = (
    "compute_base_forecast",
    "load_market_data",
    "compute_seasonal_adjustments",
    "apply_market_factors",
    "compute_confidence_intervals",
    "run_monte_carlo",
    "compute_accuracy",
    "generate_recommendations",
    "assemble_result",
)

SEASONAL_MONTHS = (11, 12, 1)  # Nov, Dec, Jan
MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 0.95


class CashFlowForecaster:
    """
    Cash flow forecasting and risk quantification engine.

    Provides:
    - Linear trend point forecasts
    - Enhanced forecasts with market adjustment, confidence intervals,
      Monte Carlo outcome distribution, accuracy and recommendations
    - Monthly income/expense scenario forecasts with risk-level bounds

    Example:
    ```python
    forecaster = CashFlowForecaster(simulator=MonteCarloSimulator(seed=42))

    history = [{"date": "2024-01-01", "amount": 52000}, ...]
    result = forecaster.generate_enhanced_forecast(history, horizon=6)
    print(result.monte_carlo.probability_of_negative)
    ```
    """

    def __init__(
        self,
        simulator: Optional[MonteCarloSimulator] = None,
        interval_calculator: Optional[ConfidenceIntervalCalculator] = None,
        market_data_provider: Optional[MarketDataProvider] = None,
        model: Optional[ForecastModel] = None,
        model_id: Optional[str] = None,
        aggregator: Optional[HistoricalDataAggregator] = None,
        sink: Optional[ForecastSink] = None,
        analyzer: Optional[TrendAnalyzer] = None
    ):
        """
        Initialize forecaster.

        Args:
            simulator: Monte Carlo simulator (10,000 unseeded paths by default)
            interval_calculator: Confidence band calculator
            market_data_provider: Fetches market snapshots when the caller
                does not pass them in
            model: Trained forecast model used for the base forecast
            model_id: Id the model was trained under
            aggregator: History source for run_scenario
            sink: Destination for scenario forecasts
            analyzer: Descriptive trend analyzer for result metadata
        """
        if model is not None and model_id is None:
            raise ValueError("model_id is required when a model is supplied")

        self.simulator = simulator or MonteCarloSimulator()
        self.interval_calculator = interval_calculator or ConfidenceIntervalCalculator()
        self.market_data_provider = market_data_provider
        self.model = model
        self.model_id = model_id
        self.aggregator = aggregator
        self.sink = sink
        self.analyzer = analyzer or TrendAnalyzer()

    @classmethod
    def from_config(
        cls,
        config_class=None,
        ledger: Optional[LedgerProvider] = None,
        sink: Optional[ForecastSink] = None
    ) -> 'CashFlowForecaster':
        """Build a forecaster from a settings class (see config.settings)"""
        if config_class is None:
            from config.settings import get_config
            config_class = get_config()

        seed = config_class.MONTE_CARLO_SEED
        simulator = MonteCarloSimulator(
            simulation_count=config_class.MONTE_CARLO_SIMULATIONS,
            seed=seed,
            workers=config_class.MONTE_CARLO_WORKERS,
            time_budget=config_class.MONTE_CARLO_TIME_BUDGET
        )

        market_provider = None
        if config_class.FRED_API_KEY:
            market_provider = FredMarketDataProvider(
                api_key=config_class.FRED_API_KEY,
                base_url=config_class.FRED_BASE_URL,
                timeout=config_class.MARKET_DATA_TIMEOUT
            )

        aggregator = None
        if ledger is not None:
            aggregator = HistoricalDataAggregator(
                ledger,
                payment_predictor=PaymentDatePredictor(seed=seed),
                lookback_months=config_class.LOOKBACK_MONTHS
            )

        logger.info(
            f"Forecaster configured: {config_class.MONTE_CARLO_SIMULATIONS} simulations, "
            f"market data {'enabled' if market_provider else 'disabled'}"
        )
        return cls(
            simulator=simulator,
            market_data_provider=market_provider,
            aggregator=aggregator,
            sink=sink
        )

    # =========================================================================
    # Point forecast
    # =========================================================================

    def generate_forecast(self, historical_points: Sequence[Any], horizon: int) -> List[float]:
        """
        Forecast the next horizon periods of a {date, amount} series.

        Raises:
            ValidationError: A point has a malformed date or amount
        """
        points = parse_historical_points(historical_points)
        return self._base_forecast([p.amount for p in points], horizon)

    def _base_forecast(self, values: Sequence[float], horizon: int) -> List[float]:
        if self.model is not None:
            return self.model.predict(self.model_id, values, horizon)
        return linear_forecast(values, horizon)

    # =========================================================================
    # Enhanced forecast
    # =========================================================================

    def generate_enhanced_forecast(
        self,
        historical_points: Sequence[Any],
        horizon: int = 12,
        confidence_level: float = 0.95,
        market_data: Optional[Sequence[MarketSnapshot]] = None
    ) -> EnhancedForecast:
        """
        Generate a risk-quantified forecast.

        Args:
            historical_points: {date, amount} records, dicts or HistoricalPoints
            horizon: Months to forecast
            confidence_level: Confidence interval level (0.90, 0.95, 0.99)
            market_data: Already-fetched market snapshots; when None the
                configured market data provider is asked

        Returns:
            EnhancedForecast with base_forecast holding the market-adjusted values

        Raises:
            ValidationError: A point has a malformed date or amount
        """
        points = parse_historical_points(historical_points)
        values = [p.amount for p in points]
        dates = [p.date for p in points]
        logger.info(f"Generating enhanced forecast: {len(points)} points, {horizon} months")

        # 1. Base forecast
        base_forecast = self._base_forecast(values, horizon)
        logger.debug(f"compute_base_forecast: {len(base_forecast)} periods")

        # 2. Market data
        snapshots = self._load_market_data(market_data)
        logger.debug(f"load_market_data: {len(snapshots)} snapshots")

        # 3. Seasonal adjustments
        seasonal = seasonal_patterns(values, dates)

        # 4. Market factors
        adjusted = apply_market_factors(base_forecast, snapshots)

        # 5. Confidence intervals
        intervals = self.interval_calculator.calculate(adjusted, values, confidence_level)
        logger.debug(f"compute_confidence_intervals: level {confidence_level}")

        # 6. Monte Carlo
        returns = calculate_returns(values)
        monte_carlo = self.simulator.simulate(adjusted, returns)
        logger.debug(f"run_monte_carlo: {monte_carlo.simulation_count} paths")

        # 7. Accuracy
        accuracy = backtest(values, horizon, self._base_forecast)
        logger.debug(f"compute_accuracy: mape {accuracy.mape:.2f}")

        # 8. Recommendations
        recommendations = generate_recommendations(monte_carlo, adjusted, accuracy)
        logger.debug(f"generate_recommendations: {len(recommendations)} advisories")

        # 9. Assemble
        metadata: Dict[str, Any] = {
            "historical_periods": len(points),
            "forecast_periods": horizon,
            "confidence_level": confidence_level,
            "z_score": z_score(confidence_level),
            "mean_return": round(mean_return(returns), 6),
            "volatility": round(calculate_volatility(returns), 6),
            "model_type": getattr(self.model, "model_type", "linear_trend"),
            "stages": list(PIPELINE_STAGES),
            "trend": self.analyzer.analyze(values, dates, "cash flow").to_dict()
        }
        snapshot = latest_snapshot(snapshots)
        if snapshot is not None:
            metadata["market_impact"] = {k: round(v, 6) for k, v in market_impact(snapshot).items()}

        return EnhancedForecast(
            base_forecast=adjusted,
            confidence_intervals=intervals,
            seasonal_adjustments=seasonal,
            monte_carlo=monte_carlo,
            market_factors=snapshots,
            accuracy=accuracy,
            recommendations=recommendations,
            metadata=metadata
        )

    def _load_market_data(self, market_data: Optional[Sequence[MarketSnapshot]]) -> List[MarketSnapshot]:
        """Caller-supplied snapshots, else the provider's; [] on any provider failure"""
        if market_data is not None:
            return list(market_data)
        if self.market_data_provider is None:
            return []

        try:
            return list(self.market_data_provider.get_snapshots())
        except Exception as e:
            logger.warning(f"Market data unavailable, continuing without adjustment: {e}")
            return []

    # =========================================================================
    # Scenario forecast
    # =========================================================================

    def run_scenario(
        self,
        entity_id: str,
        scenario: ScenarioAssumptions,
        months: int = 12,
        as_of: Optional[date] = None
    ) -> List[ForecastPoint]:
        """
        Gather history, forecast a scenario and store the result.

        Raises:
            ValueError: No aggregator configured
        """
        if self.aggregator is None:
            raise ValueError("run_scenario requires a HistoricalDataAggregator")

        as_of = as_of or date.today()
        forecast_input = self.aggregator.gather(entity_id, months, as_of)
        adjusted_input = apply_scenario_assumptions(forecast_input, scenario)

        points = self.forecast_scenario(
            adjusted_input, scenario, months, start=as_of.replace(day=1)
        )

        if self.sink is not None:
            written = self.sink.save(scenario.scenario_id, points)
            logger.info(f"Saved {written} forecast periods for scenario {scenario.scenario_id}")

        return points

    def forecast_scenario(
        self,
        forecast_input: ForecastInput,
        scenario: ScenarioAssumptions,
        months: int = 12,
        start: Optional[date] = None
    ) -> List[ForecastPoint]:
        """
        Monthly net cash flow forecast for a scenario.

        Args:
            forecast_input: Transactions, pending invoices and recurring items
            scenario: Scenario settings (risk level selects the bounds)
            months: Number of months to forecast
            start: First forecast month (current month by default)

        Returns:
            One ForecastPoint per month
        """
        start = (start or date.today()).replace(day=1)
        adjustment = scenario.risk_level.adjustment

        return [
            self._monthly_forecast(i, add_months(start, i), forecast_input, adjustment)
            for i in range(months)
        ]

    def _monthly_forecast(
        self,
        period_index: int,
        month: date,
        forecast_input: ForecastInput,
        adjustment: RiskAdjustment
    ) -> ForecastPoint:
        income = self._forecast_income(month, forecast_input, adjustment)
        expenses = self._forecast_expenses(month, forecast_input, adjustment)

        predicted = income.predicted - expenses.predicted
        conservative = income.conservative - expenses.optimistic
        optimistic = income.optimistic - expenses.conservative
        confidence = min(income.confidence, expenses.confidence)

        return ForecastPoint(
            period_index=period_index,
            month=month,
            predicted=predicted,
            conservative=conservative,
            optimistic=optimistic,
            confidence=confidence,
            factors=self._identify_factors(month, forecast_input),
            risks=self._identify_risks(forecast_input, predicted, conservative, confidence),
            income=income,
            expenses=expenses
        )

    def _forecast_income(
        self,
        month: date,
        forecast_input: ForecastInput,
        adjustment: RiskAdjustment
    ) -> ForecastBand:
        transactions = forecast_input.transactions
        historical = historical_average(transactions, month.month, TransactionKind.INCOME)
        trend = trend_factor(transactions, TransactionKind.INCOME)
        seasonal = seasonal_factor(month.month, forecast_input.seasonal_patterns)
        invoice_payments = predict_invoice_payments(month, forecast_input.pending_invoices)

        base = historical * trend * seasonal + invoice_payments
        return ForecastBand(
            predicted=base,
            conservative=base * adjustment.conservative,
            optimistic=base * adjustment.optimistic,
            confidence=prediction_confidence(historical, invoice_payments)
        )

    def _forecast_expenses(
        self,
        month: date,
        forecast_input: ForecastInput,
        adjustment: RiskAdjustment
    ) -> ForecastBand:
        transactions = forecast_input.transactions
        historical = historical_average(transactions, month.month, TransactionKind.EXPENSE)
        trend = trend_factor(transactions, TransactionKind.EXPENSE)
        seasonal = seasonal_factor(month.month, forecast_input.seasonal_patterns)
        recurring = sum(
            item.average_amount for item in forecast_input.recurring_items
            if item.kind == TransactionKind.EXPENSE
        )

        base = historical * trend * seasonal + recurring
        return ForecastBand(
            predicted=base,
            conservative=base * adjustment.conservative_expense,
            optimistic=base * adjustment.optimistic_expense,
            confidence=prediction_confidence(historical, recurring)
        )

    def _identify_factors(self, month: date, forecast_input: ForecastInput) -> List[str]:
        factors = []

        if month.month in SEASONAL_MONTHS:
            factors.append(f"{month.strftime('%B')} seasonal effects")

        if forecast_input.pending_invoices:
            factors.append(f"{len(forecast_input.pending_invoices)} pending invoices")

        if forecast_input.recurring_items:
            factors.append(f"{len(forecast_input.recurring_items)} recurring items identified")

        return factors

    def _identify_risks(
        self,
        forecast_input: ForecastInput,
        predicted: float,
        conservative: float,
        confidence: float
    ) -> List[str]:
        risks = []

        if conservative < 0:
            risks.append("Risk of negative cash flow")

        pending_amount = sum(inv.amount for inv in forecast_input.pending_invoices)
        if pending_amount > predicted * 0.5:
            risks.append("High dependency on pending invoice payments")

        if confidence < 0.5:
            risks.append("Low confidence in prediction due to limited data")

        return risks


def predict_invoice_payments(month: date, invoices: Sequence[PendingInvoiceRef]) -> float:
    """Total of invoices expected to be paid within the given month"""
    total = 0.0
    for invoice in invoices:
        paid_on = invoice.predicted_payment_date or invoice.due_date
        if paid_on.year == month.year and paid_on.month == month.month:
            total += invoice.amount
    return total


def prediction_confidence(historical: float, predicted: float) -> float:
    """
    Agreement between the history-based figure and the forward-looking one.

    0 without history; otherwise the min/max ratio of the two, kept
    within [0.1, 0.95].
    """
    if historical <= 0:
        return 0.0
    ratio = min(predicted / historical, historical / predicted) if predicted > 0 else 0.0
    return max(MIN_CONFIDENCE, min(ratio, MAX_CONFIDENCE))
