"""Tests for the forecast model seam."""
import pytest

from cashflow_risk.forecasting.cash_flow_forecaster import CashFlowForecaster
from cashflow_risk.forecasting.ml_models import LinearTrendModel, ModelConfig, ModelNotFoundError
from cashflow_risk.forecasting.monte_carlo import MonteCarloSimulator


class TestLinearTrendModel:
    """Test suite for LinearTrendModel."""

    def test_train_perfect_line(self):
        model = LinearTrendModel()
        accuracy = model.train("line", ModelConfig("linear_regression", [10, 20, 30, 40]))

        assert accuracy == pytest.approx(1.0)
        assert model.available_models() == ["line"]

    def test_validation_accuracy_clipped(self):
        model = LinearTrendModel()
        accuracy = model.train("noisy", ModelConfig(
            "linear_regression", [10, 20, 30, 40], validation_data=[0, 500, 0]
        ))
        assert 0.0 <= accuracy <= 1.0

    def test_predict_continues_slope(self):
        model = LinearTrendModel()
        model.train("line", ModelConfig("linear_regression", [10, 20, 30, 40]))

        assert model.predict("line", [40], 2) == pytest.approx([50, 60])

    def test_predict_floors_at_zero(self):
        model = LinearTrendModel()
        model.train("down", ModelConfig("linear_regression", [40, 30, 20, 10]))
        assert model.predict("down", [10], 3) == pytest.approx([0, 0, 0])

    def test_unknown_model(self):
        with pytest.raises(ModelNotFoundError):
            LinearTrendModel().predict("missing", [1, 2], 3)

    def test_insufficient_training_data(self):
        with pytest.raises(ValueError):
            LinearTrendModel().train("x", ModelConfig("linear_regression", [5]))


class TestForecasterWithModel:
    """Test suite for plugging a trained model into the forecaster."""

    def test_model_drives_base_forecast(self):
        model = LinearTrendModel()
        model.train("line", ModelConfig("linear_regression", [10, 20, 30, 40]))
        forecaster = CashFlowForecaster(
            simulator=MonteCarloSimulator(simulation_count=100, seed=1),
            model=model,
            model_id="line"
        )

        history = [{"date": f"2024-0{i + 1}-01", "amount": v} for i, v in enumerate([10, 20, 30, 40])]
        assert forecaster.generate_forecast(history, 2) == pytest.approx([50, 60])

        result = forecaster.generate_enhanced_forecast(history, horizon=2)
        assert result.metadata["model_type"] == "linear_regression"

    def test_model_requires_id(self):
        with pytest.raises(ValueError):
            CashFlowForecaster(model=LinearTrendModel())
