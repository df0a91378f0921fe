"""Shared test fixtures for the cash flow risk engine."""
import pytest
from datetime import date, timedelta

from config.settings import TestingConfig
from cashflow_risk.forecasting.models import (
    MarketSnapshot, PendingInvoiceRef, TransactionKind, TransactionRecord
)
from cashflow_risk.forecasting.monte_carlo import MonteCarloSimulator
from cashflow_risk.forecasting.cash_flow_forecaster import CashFlowForecaster


@pytest.fixture
def monthly_history():
    """24 months of growing net cash flow as {date, amount} records."""
    history = []
    for i in range(24):
        year = 2022 + i // 12
        month = i % 12 + 1
        amount = 10000 + 250 * i + (1500 if month in (11, 12) else 0)
        history.append({"date": date(year, month, 1).isoformat(), "amount": amount})
    return history


@pytest.fixture
def rent_transactions():
    """Four rent payments 30 days apart."""
    start = date(2024, 1, 1)
    return [
        TransactionRecord(
            date=start + timedelta(days=30 * i),
            amount=700.0,
            kind=TransactionKind.EXPENSE,
            description="Rent"
        )
        for i in range(4)
    ]


@pytest.fixture
def ledger_transactions():
    """A year of monthly retainer income (1000) and rent (400)."""
    transactions = []
    for month in range(1, 13):
        transactions.append(TransactionRecord(
            date=date(2023, month, 15),
            amount=1000.0,
            kind=TransactionKind.INCOME,
            description="Client retainer"
        ))
        transactions.append(TransactionRecord(
            date=date(2023, month, 1),
            amount=400.0,
            kind=TransactionKind.EXPENSE,
            description="Office rent"
        ))
    return transactions


@pytest.fixture
def pending_invoice():
    return PendingInvoiceRef(amount=5000.0, due_date=date(2024, 1, 20), invoice_id="INV-1")


@pytest.fixture
def market_snapshot():
    return MarketSnapshot(
        date=date(2024, 5, 1),
        interest_rate=5.0,
        inflation_rate=2.0,
        gdp_growth=2.0,
        unemployment_rate=4.0
    )


@pytest.fixture
def forecaster():
    """Forecaster with a small seeded simulator."""
    return CashFlowForecaster(simulator=MonteCarloSimulator(simulation_count=2000, seed=42))


@pytest.fixture
def app():
    """Flask app bound to an in-memory database."""
    from cashflow_risk.database import create_app, db

    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()
