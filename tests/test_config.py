"""Tests for configuration settings."""
from config.settings import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    config,
    get_config,
)


class TestGetConfig:
    """Test suite for environment-based config selection."""

    def test_testing(self, monkeypatch):
        monkeypatch.setenv("CASHFLOW_ENV", "testing")
        assert get_config() is TestingConfig

    def test_production(self, monkeypatch):
        monkeypatch.setenv("CASHFLOW_ENV", "production")
        assert get_config() is ProductionConfig

    def test_default(self, monkeypatch):
        monkeypatch.delenv("CASHFLOW_ENV", raising=False)
        assert get_config() is DevelopmentConfig

    def test_unknown_falls_back(self, monkeypatch):
        monkeypatch.setenv("CASHFLOW_ENV", "staging")
        assert get_config() is config["default"]


class TestSettings:
    """Test suite for configuration values."""

    def test_testing_values(self):
        assert TestingConfig.SQLALCHEMY_DATABASE_URI == "sqlite:///:memory:"
        assert TestingConfig.MONTE_CARLO_SEED == 42
        assert TestingConfig.FRED_API_KEY is None

    def test_forecast_defaults(self):
        assert TestingConfig.DEFAULT_CONFIDENCE_LEVEL in (0.90, 0.95, 0.99)
        assert TestingConfig.MONTE_CARLO_SIMULATIONS >= 1
        assert TestingConfig.FRED_BASE_URL.startswith("https://")

    def test_production_caps_interactive_runs(self):
        assert ProductionConfig.MONTE_CARLO_TIME_BUDGET is not None
