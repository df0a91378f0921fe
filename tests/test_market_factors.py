"""Tests for the market factor adjuster."""
import pytest
from dataclasses import replace
from datetime import date

from cashflow_risk.forecasting.market_factors import (
    apply_market_factors,
    latest_snapshot,
    market_impact,
)


class TestMarketImpact:
    """Test suite for market_impact."""

    def test_factor_values(self, market_snapshot):
        impact = market_impact(market_snapshot)

        assert impact["interest_rate_impact"] == pytest.approx(0.98)
        assert impact["inflation_impact"] == pytest.approx(1.02)
        assert impact["gdp_impact"] == pytest.approx(1.01)
        assert impact["unemployment_impact"] == pytest.approx(0.98)
        assert impact["combined_impact"] == pytest.approx(0.98 * 1.02 * 1.01 * 0.98)

    def test_neutral_conditions(self, market_snapshot):
        neutral = replace(market_snapshot, interest_rate=3.0, inflation_rate=0.0,
                          gdp_growth=0.0, unemployment_rate=3.0)
        assert market_impact(neutral)["combined_impact"] == pytest.approx(1.0)


class TestApplyMarketFactors:
    """Test suite for apply_market_factors."""

    def test_no_snapshot_is_identity(self):
        forecast = [100.0, 200.0, 300.0]
        adjusted = apply_market_factors(forecast, [])

        assert adjusted == forecast
        assert adjusted is not forecast

    def test_scales_every_value(self, market_snapshot):
        combined = market_impact(market_snapshot)["combined_impact"]
        adjusted = apply_market_factors([100.0, 200.0], [market_snapshot])
        assert adjusted == pytest.approx([100 * combined, 200 * combined])

    def test_latest_snapshot_wins(self, market_snapshot):
        older = replace(market_snapshot, date=date(2023, 1, 1), interest_rate=10.0)
        assert latest_snapshot([market_snapshot, older]) is market_snapshot
        assert apply_market_factors([100.0], [older, market_snapshot]) == \
            apply_market_factors([100.0], [market_snapshot])

    def test_latest_snapshot_empty(self):
        assert latest_snapshot([]) is None
