"""Tests for CashFlowForecaster."""
import json
import pytest
from datetime import date
from unittest.mock import Mock

from config.settings import TestingConfig
from cashflow_risk.data.aggregator import HistoricalDataAggregator, PaymentDatePredictor
from cashflow_risk.data.providers import (
    FredMarketDataProvider,
    InMemoryForecastSink,
    InMemoryLedger,
    MarketDataError,
    MarketDataProvider,
    StaticMarketDataProvider,
)
from cashflow_risk.data.validation import ValidationError
from cashflow_risk.forecasting.cash_flow_forecaster import (
    PIPELINE_STAGES,
    CashFlowForecaster,
    predict_invoice_payments,
    prediction_confidence,
)
from cashflow_risk.forecasting.models import (
    ForecastInput, RiskLevel, ScenarioAssumptions, TransactionKind, TransactionRecord
)
from cashflow_risk.forecasting.monte_carlo import MonteCarloSimulator
from cashflow_risk.forecasting.recurring_detector import RecurringPatternDetector
from cashflow_risk.forecasting.trend_analyzer import linear_forecast, seasonal_patterns


class TestGenerateForecast:
    """Test suite for the point forecast."""

    def test_empty_history(self, forecaster):
        assert forecaster.generate_forecast([], 6) == [0, 0, 0, 0, 0, 0]

    def test_two_points(self, forecaster):
        history = [{"date": "2024-01-01", "amount": 100}, {"date": "2024-02-01", "amount": 200}]
        assert forecaster.generate_forecast(history, 3) == pytest.approx([250, 350, 450])

    def test_unsorted_input(self, forecaster):
        history = [{"date": "2024-02-01", "amount": 200}, {"date": "2024-01-01", "amount": 100}]
        assert forecaster.generate_forecast(history, 1) == pytest.approx([250])

    def test_malformed_input(self, forecaster):
        with pytest.raises(ValidationError):
            forecaster.generate_forecast([{"date": "2024-01-01", "amount": "lots"}], 3)


class TestEnhancedForecast:
    """Test suite for generate_enhanced_forecast."""

    def test_result_shape(self, forecaster, monthly_history):
        result = forecaster.generate_enhanced_forecast(monthly_history, horizon=6)

        assert len(result.base_forecast) == 6
        assert len(result.confidence_intervals) == 6
        assert len(result.seasonal_adjustments) == 12
        assert result.monte_carlo.simulation_count == 2000
        assert result.metadata["historical_periods"] == 24
        assert result.metadata["forecast_periods"] == 6
        assert result.metadata["stages"] == list(PIPELINE_STAGES)

    def test_invariants(self, forecaster, monthly_history):
        result = forecaster.generate_enhanced_forecast(monthly_history, horizon=12, confidence_level=0.99)
        p = result.monte_carlo.percentiles

        assert p["p5"] <= p["p25"] <= p["p50"] <= p["p75"] <= p["p95"]
        assert 0 <= result.monte_carlo.probability_of_negative <= 1
        for interval in result.confidence_intervals:
            assert 0 <= interval.lower <= interval.upper
            assert interval.confidence_level == 0.99
        assert result.metadata["z_score"] == 2.576

    def test_seeded_runs_identical(self, monthly_history):
        def run():
            forecaster = CashFlowForecaster(simulator=MonteCarloSimulator(simulation_count=500, seed=9))
            return forecaster.generate_enhanced_forecast(monthly_history, horizon=6).to_dict()

        assert run() == run()

    def test_same_forecaster_repeatable(self, monthly_history):
        forecaster = CashFlowForecaster(simulator=MonteCarloSimulator(simulation_count=500, seed=9))

        first = forecaster.generate_enhanced_forecast(monthly_history, horizon=6)
        second = forecaster.generate_enhanced_forecast(monthly_history, horizon=6)

        assert first.monte_carlo.percentiles == second.monte_carlo.percentiles
        assert first.to_dict() == second.to_dict()

    def test_no_market_data_is_identity(self, forecaster, monthly_history):
        result = forecaster.generate_enhanced_forecast(monthly_history, horizon=6)
        values = [p["amount"] for p in monthly_history]

        assert result.base_forecast == pytest.approx(linear_forecast(values, 6))
        assert result.market_factors == []
        assert "market_impact" not in result.metadata

    def test_market_snapshot_applied(self, forecaster, monthly_history, market_snapshot):
        plain = forecaster.generate_enhanced_forecast(monthly_history, horizon=3)
        adjusted = forecaster.generate_enhanced_forecast(monthly_history, horizon=3, market_data=[market_snapshot])
        combined = adjusted.metadata["market_impact"]["combined_impact"]

        assert adjusted.base_forecast == pytest.approx([v * combined for v in plain.base_forecast], rel=1e-5)
        assert adjusted.market_factors == [market_snapshot]

    def test_provider_snapshots_used(self, monthly_history, market_snapshot):
        forecaster = CashFlowForecaster(
            simulator=MonteCarloSimulator(simulation_count=100, seed=1),
            market_data_provider=StaticMarketDataProvider([market_snapshot])
        )
        result = forecaster.generate_enhanced_forecast(monthly_history, horizon=3)
        assert result.market_factors == [market_snapshot]

    def test_provider_failure_degrades_to_identity(self, monthly_history):
        provider = Mock(spec=MarketDataProvider)
        provider.get_snapshots.side_effect = MarketDataError("feed down")
        forecaster = CashFlowForecaster(
            simulator=MonteCarloSimulator(simulation_count=100, seed=1),
            market_data_provider=provider
        )

        result = forecaster.generate_enhanced_forecast(monthly_history, horizon=4)
        values = [p["amount"] for p in monthly_history]

        assert result.market_factors == []
        assert result.base_forecast == pytest.approx(linear_forecast(values, 4))

    def test_short_history_accuracy_is_zero(self, forecaster):
        result = forecaster.generate_enhanced_forecast([{"date": "2024-01-01", "amount": 500}], horizon=3)
        accuracy = result.accuracy

        assert (accuracy.mape, accuracy.rmse, accuracy.r2) == (0.0, 0.0, 0.0)
        assert result.base_forecast == pytest.approx([500, 500, 500])

    def test_empty_history(self, forecaster):
        result = forecaster.generate_enhanced_forecast([], horizon=3)

        assert result.base_forecast == [0.0, 0.0, 0.0]
        assert len(result.seasonal_adjustments) == 12
        assert result.monte_carlo.probability_of_negative == 0

    def test_result_serializable(self, forecaster, monthly_history, market_snapshot):
        result = forecaster.generate_enhanced_forecast(monthly_history, horizon=3, market_data=[market_snapshot])
        data = json.loads(json.dumps(result.to_dict()))

        assert set(data) == {
            "base_forecast", "confidence_intervals", "seasonal_adjustments", "monte_carlo",
            "market_factors", "accuracy", "recommendations", "metadata"
        }


class TestScenarioForecast:
    """Test suite for the monthly income/expense scenario forecast."""

    @pytest.fixture
    def forecast_input(self, ledger_transactions):
        return ForecastInput(
            transactions=ledger_transactions,
            recurring_items=RecurringPatternDetector().detect(ledger_transactions)
        )

    def test_monthly_bands(self, forecaster, forecast_input):
        points = forecaster.forecast_scenario(forecast_input, ScenarioAssumptions(), months=3, start=date(2024, 1, 1))
        january = points[0]

        assert [p.month for p in points] == [date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)]
        assert january.income.predicted == pytest.approx(12000)
        assert january.expenses.predicted == pytest.approx(5200)
        assert january.predicted == pytest.approx(6800)
        assert january.conservative == pytest.approx(12000 * 0.85 - 5200 * 0.85)
        assert january.optimistic == pytest.approx(12000 * 1.15 - 5200 * 1.15)
        assert january.confidence == pytest.approx(0.1)

    def test_factors_and_risks(self, forecaster, forecast_input):
        points = forecaster.forecast_scenario(forecast_input, ScenarioAssumptions(), months=3, start=date(2024, 1, 1))

        assert points[0].factors == ["January seasonal effects", "2 recurring items identified"]
        assert points[1].factors == ["2 recurring items identified"]
        assert points[0].risks == ["Low confidence in prediction due to limited data"]

    def test_risk_level_widens_bounds(self, forecaster, forecast_input):
        low = forecaster.forecast_scenario(
            forecast_input, ScenarioAssumptions(risk_level=RiskLevel.LOW), months=1, start=date(2024, 1, 1)
        )[0]
        high = forecaster.forecast_scenario(
            forecast_input, ScenarioAssumptions(risk_level=RiskLevel.HIGH), months=1, start=date(2024, 1, 1)
        )[0]

        assert high.income.conservative < low.income.conservative
        assert high.income.optimistic > low.income.optimistic
        assert high.income.conservative == pytest.approx(12000 * 0.7)

    def test_pending_invoice_in_due_month(self, forecaster, forecast_input, pending_invoice):
        forecast_input.pending_invoices.append(pending_invoice)
        points = forecaster.forecast_scenario(forecast_input, ScenarioAssumptions(), months=2, start=date(2024, 1, 1))

        assert points[0].income.predicted == pytest.approx(17000)
        assert points[1].income.predicted == pytest.approx(12000)
        assert points[0].income.confidence == pytest.approx(5000 / 12000)
        assert "1 pending invoices" in points[0].factors

    def test_negative_outlook_flagged(self, forecaster):
        expenses = [
            TransactionRecord(date=date(2023, m, 5), amount=2000.0, kind=TransactionKind.EXPENSE, description="Lease")
            for m in range(1, 13)
        ]
        point = forecaster.forecast_scenario(ForecastInput(transactions=expenses), ScenarioAssumptions(),
                                             months=1, start=date(2024, 3, 1))[0]

        assert point.predicted < 0
        assert "Risk of negative cash flow" in point.risks
        assert point.income.confidence == 0

    def test_supplied_seasonal_table(self, forecaster, forecast_input):
        forecast_input.seasonal_patterns = seasonal_patterns([100, 200], [date(2024, 1, 1), date(2024, 2, 1)])
        points = forecaster.forecast_scenario(forecast_input, ScenarioAssumptions(), months=2, start=date(2024, 1, 1))

        assert points[0].income.predicted == pytest.approx(12000 * 100 / 150)
        assert points[1].income.predicted == pytest.approx(12000 * 200 / 150)

    def test_empty_input(self, forecaster):
        points = forecaster.forecast_scenario(ForecastInput(transactions=[]), ScenarioAssumptions(), months=4)

        assert len(points) == 4
        assert all(p.predicted == 0 and p.confidence == 0 for p in points)

    def test_run_scenario_saves(self, ledger_transactions):
        sink = InMemoryForecastSink()
        aggregator = HistoricalDataAggregator(
            InMemoryLedger(transactions={"acme": ledger_transactions}),
            payment_predictor=PaymentDatePredictor()
        )
        forecaster = CashFlowForecaster(aggregator=aggregator, sink=sink)
        scenario = ScenarioAssumptions(scenario_id="growth", revenue_growth_pct=10)

        points = forecaster.run_scenario("acme", scenario, months=6, as_of=date(2024, 1, 10))

        assert len(points) == 6
        assert points[0].month == date(2024, 1, 1)
        assert points[0].income.predicted == pytest.approx(13200)
        assert sink.forecasts["growth"] == points

        forecaster.run_scenario("acme", scenario, months=2, as_of=date(2024, 1, 10))
        assert len(sink.forecasts["growth"]) == 2

    def test_run_scenario_requires_aggregator(self, forecaster):
        with pytest.raises(ValueError):
            forecaster.run_scenario("acme", ScenarioAssumptions())


class TestHelpers:
    """Test suite for module-level helpers."""

    def test_predict_invoice_payments(self, pending_invoice):
        assert predict_invoice_payments(date(2024, 1, 1), [pending_invoice]) == 5000
        assert predict_invoice_payments(date(2024, 2, 1), [pending_invoice]) == 0

    def test_predicted_payment_date_preferred(self, pending_invoice):
        from dataclasses import replace
        late = replace(pending_invoice, predicted_payment_date=date(2024, 2, 4))
        assert predict_invoice_payments(date(2024, 1, 1), [late]) == 0
        assert predict_invoice_payments(date(2024, 2, 1), [late]) == 5000

    @pytest.mark.parametrize("historical,predicted,expected", [
        (0, 100, 0.0),
        (100, 0, 0.1),
        (100, 50, 0.5),
        (100, 100, 0.95),
        (100, 400, 0.25),
    ])
    def test_prediction_confidence(self, historical, predicted, expected):
        assert prediction_confidence(historical, predicted) == pytest.approx(expected)


class TestFromConfig:
    """Test suite for building a forecaster from settings."""

    def test_testing_config(self):
        forecaster = CashFlowForecaster.from_config(TestingConfig)

        assert forecaster.simulator.simulation_count == 1000
        assert forecaster.market_data_provider is None
        assert forecaster.aggregator is None

    def test_fred_enabled_with_key(self):
        class WithFred(TestingConfig):
            FRED_API_KEY = "abc"

        forecaster = CashFlowForecaster.from_config(WithFred, ledger=InMemoryLedger())

        assert isinstance(forecaster.market_data_provider, FredMarketDataProvider)
        assert forecaster.aggregator.lookback_months == 24
