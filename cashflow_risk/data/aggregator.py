"""
Historical Data Aggregator

Pulls the bounded window of history the scenario forecast needs:
transactions, pending invoices with predicted payment dates, and the
recurring items derived from those transactions.
"""

import calendar
import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Optional

import numpy as np

from ..forecasting.models import (
    ForecastInput, PendingInvoiceRef, ScenarioAssumptions, TransactionKind
)
from ..forecasting.recurring_detector import RecurringPatternDetector
from .providers import LedgerProvider
from .validation import parse_invoices, parse_transactions

logger = logging.getLogger(__name__)


def add_months(d: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the month end"""
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


class PaymentDatePredictor:
    """
    Predicts when an open invoice will be paid.

    Each prediction draws once from the generator it is given: on time with
    probability on_time_probability, otherwise delay_days after the due date.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        on_time_probability: float = 0.8,
        delay_days: int = 15
    ):
        self.seed = seed
        self.on_time_probability = on_time_probability
        self.delay_days = delay_days

    def generator(self) -> np.random.Generator:
        """Fresh generator for one gather run"""
        return np.random.default_rng(self.seed)

    def predict(self, invoice: PendingInvoiceRef, rng: np.random.Generator) -> date:
        if rng.random() < self.on_time_probability:
            return invoice.due_date
        return invoice.due_date + timedelta(days=self.delay_days)


class HistoricalDataAggregator:
    """
    Assembles ForecastInput for one entity.

    Example:
    ```python
    aggregator = HistoricalDataAggregator(ledger, payment_predictor=PaymentDatePredictor(seed=7))
    forecast_input = aggregator.gather("company-1", horizon_months=12)
    ```
    """

    def __init__(
        self,
        ledger: LedgerProvider,
        payment_predictor: Optional[PaymentDatePredictor] = None,
        detector: Optional[RecurringPatternDetector] = None,
        lookback_months: int = 24
    ):
        """
        Args:
            ledger: Transaction history provider
            payment_predictor: Payment date model for open invoices
            detector: Recurring pattern detector
            lookback_months: Minimum history window in months
        """
        self.ledger = ledger
        self.payment_predictor = payment_predictor or PaymentDatePredictor()
        self.detector = detector or RecurringPatternDetector()
        self.lookback_months = lookback_months

    def gather(
        self,
        entity_id: str,
        horizon_months: int,
        as_of: Optional[date] = None
    ) -> ForecastInput:
        """
        Collect forecast input.

        The window covers max(horizon_months, lookback_months) months up to
        as_of (today by default).

        Raises:
            ValidationError: The ledger returned a malformed record
        """
        as_of = as_of or date.today()
        lookback = max(horizon_months, self.lookback_months)
        start = add_months(as_of, -lookback)

        transactions = parse_transactions(self.ledger.get_transactions(entity_id, start, as_of))
        rng = self.payment_predictor.generator()
        invoices = [
            replace(invoice, predicted_payment_date=self.payment_predictor.predict(invoice, rng))
            for invoice in parse_invoices(self.ledger.get_pending_invoices(entity_id))
        ]
        recurring = self.detector.detect(transactions)

        logger.info(
            f"Gathered {len(transactions)} transactions, {len(invoices)} pending invoices "
            f"and {len(recurring)} recurring items for {entity_id} since {start.isoformat()}"
        )

        return ForecastInput(
            transactions=transactions,
            pending_invoices=invoices,
            recurring_items=recurring
        )


def apply_scenario_assumptions(
    forecast_input: ForecastInput,
    scenario: ScenarioAssumptions
) -> ForecastInput:
    """
    Pre-scale history by the scenario's growth and inflation assumptions.

    Returns a new ForecastInput; the original records are not modified.
    """
    revenue_factor = 1 + scenario.revenue_growth_pct / 100
    cost_factor = 1 + scenario.cost_inflation_pct / 100

    if revenue_factor == 1 and cost_factor == 1:
        return forecast_input

    def scale(transaction):
        factor = revenue_factor if transaction.kind == TransactionKind.INCOME else cost_factor
        return replace(transaction, amount=transaction.amount * factor)

    return replace(
        forecast_input,
        transactions=[scale(t) for t in forecast_input.transactions]
    )
