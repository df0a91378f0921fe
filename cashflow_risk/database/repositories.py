"""
SQL-backed collaborators for the forecasting engine.

All methods must run inside a Flask application context.
"""

import logging
from datetime import date
from typing import List, Sequence

from ..data.providers import ForecastSink, LedgerProvider, MarketDataProvider
from ..data.validation import parse_invoice, parse_transaction
from ..forecasting.models import ForecastPoint, MarketSnapshot, PendingInvoiceRef, TransactionRecord
from .models import db, CashFlowForecast, Invoice, MarketIndicator, Transaction

logger = logging.getLogger(__name__)

PENDING_STATUSES = ('APPROVED', 'PROCESSING')


class SqlLedger(LedgerProvider):
    """Ledger read from the transactions and invoices tables"""

    def get_transactions(self, entity_id: str, start: date, end: date) -> List[TransactionRecord]:
        rows = Transaction.query.filter(
            Transaction.entity_id == entity_id,
            Transaction.date >= start,
            Transaction.date <= end
        ).order_by(Transaction.date.asc()).all()

        return [parse_transaction(row, i) for i, row in enumerate(rows)]

    def get_pending_invoices(self, entity_id: str) -> List[PendingInvoiceRef]:
        rows = Invoice.query.filter(
            Invoice.entity_id == entity_id,
            Invoice.status.in_(PENDING_STATUSES),
            Invoice.paid_at.is_(None)
        ).order_by(Invoice.due_date.asc()).all()

        return [parse_invoice(row, i) for i, row in enumerate(rows)]


class SqlMarketDataProvider(MarketDataProvider):
    """Market snapshots from the market_indicators table"""

    def __init__(self, limit: int = 12):
        self.limit = limit

    def get_snapshots(self) -> List[MarketSnapshot]:
        rows = MarketIndicator.query.order_by(MarketIndicator.observed_on.desc())\
                                    .limit(self.limit).all()

        return [
            MarketSnapshot(
                date=row.observed_on,
                interest_rate=row.interest_rate,
                inflation_rate=row.inflation_rate,
                gdp_growth=row.gdp_growth,
                unemployment_rate=row.unemployment_rate,
                equity_index=row.equity_index,
                fx_rate=row.fx_rate
            )
            for row in reversed(rows)
        ]


class SqlForecastSink(ForecastSink):
    """Stores scenario forecasts with delete-then-insert semantics"""

    def save(self, scenario_id: str, points: Sequence[ForecastPoint]) -> int:
        try:
            CashFlowForecast.query.filter_by(scenario_id=scenario_id).delete()

            for point in points:
                db.session.add(CashFlowForecast(
                    scenario_id=scenario_id,
                    period_index=point.period_index,
                    month=point.month,
                    income=point.income.predicted if point.income else None,
                    expenses=point.expenses.predicted if point.expenses else None,
                    net=point.predicted,
                    conservative=point.conservative,
                    optimistic=point.optimistic,
                    confidence=point.confidence,
                    forecast_data=point.to_dict()
                ))

            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.error(f"Failed to save forecast for scenario {scenario_id}")
            raise

        return len(points)
