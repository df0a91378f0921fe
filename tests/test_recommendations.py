"""Tests for the recommendation rules."""
from cashflow_risk.forecasting.models import AccuracyMetrics, MonteCarloResult
from cashflow_risk.forecasting.recommendations import generate_recommendations


def _monte_carlo(probability_of_negative=0.0, p25=100.0):
    return MonteCarloResult(
        path_values=[],
        percentiles={"p5": p25, "p25": p25, "p50": p25, "p75": p25, "p95": p25},
        mean=p25,
        std_dev=0.0,
        probability_of_negative=probability_of_negative,
        simulation_count=100
    )


GOOD_ACCURACY = AccuracyMetrics(mape=5.0, rmse=10.0, r2=0.9)


class TestGenerateRecommendations:
    """Test suite for generate_recommendations."""

    def test_healthy_outlook(self):
        assert generate_recommendations(_monte_carlo(), [100, 105], GOOD_ACCURACY) == []

    def test_all_warnings(self):
        recommendations = generate_recommendations(
            _monte_carlo(probability_of_negative=0.2, p25=50.0),
            [100, 120],
            AccuracyMetrics(mape=30.0, rmse=50.0, r2=0.2)
        )

        assert len(recommendations) == 5
        assert recommendations[0].startswith("High risk of negative cash flow")
        assert any("25% chance" in r for r in recommendations)
        assert any("accuracy is low" in r for r in recommendations)
        assert any("Low model fit" in r for r in recommendations)
        assert any("Strong growth" in r for r in recommendations)

    def test_declining_trend(self):
        recommendations = generate_recommendations(_monte_carlo(), [100, 90], GOOD_ACCURACY)
        assert recommendations == ["Declining trend detected. Implement cost reduction measures."]

    def test_zero_first_value_skips_growth_rules(self):
        recommendations = generate_recommendations(_monte_carlo(p25=0.0), [0, 500], GOOD_ACCURACY)
        assert not any("growth" in r.lower() or "declining" in r.lower() for r in recommendations)

    def test_empty_forecast(self):
        recommendations = generate_recommendations(_monte_carlo(), [], GOOD_ACCURACY)
        assert recommendations == []
