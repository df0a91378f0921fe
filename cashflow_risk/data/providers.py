"""
Collaborator Providers

Interfaces the forecasting engine consumes from surrounding systems
(ledger, market data feed, forecast store) plus in-memory and FRED-backed
implementations.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence, Tuple

import requests

from ..forecasting.models import (
    ForecastPoint, MarketSnapshot, PendingInvoiceRef, TransactionRecord
)

logger = logging.getLogger(__name__)


class MarketDataError(Exception):
    """Market data feed could not be read"""


class LedgerProvider(ABC):
    """Source of transaction history and open invoices for an entity"""

    @abstractmethod
    def get_transactions(self, entity_id: str, start: date, end: date) -> List[TransactionRecord]:
        """Transactions dated within [start, end], ordered by date"""

    @abstractmethod
    def get_pending_invoices(self, entity_id: str) -> List[PendingInvoiceRef]:
        """Approved or processing invoices not yet paid, ordered by due date"""


class MarketDataProvider(ABC):
    """Source of macro-economic snapshots"""

    @abstractmethod
    def get_snapshots(self) -> List[MarketSnapshot]:
        """Available snapshots; empty when there is no data"""


class ForecastSink(ABC):
    """Destination for scenario forecasts"""

    @abstractmethod
    def save(self, scenario_id: str, points: Sequence[ForecastPoint]) -> int:
        """Replace the stored forecast for a scenario; returns rows written"""


class InMemoryLedger(LedgerProvider):
    """Ledger held in process memory, keyed by entity id"""

    def __init__(
        self,
        transactions: Optional[Dict[str, List[TransactionRecord]]] = None,
        invoices: Optional[Dict[str, List[PendingInvoiceRef]]] = None
    ):
        self._transactions = defaultdict(list, {k: list(v) for k, v in (transactions or {}).items()})
        self._invoices = defaultdict(list, {k: list(v) for k, v in (invoices or {}).items()})

    def add_transactions(self, entity_id: str, transactions: Sequence[TransactionRecord]) -> None:
        self._transactions[entity_id].extend(transactions)

    def add_invoices(self, entity_id: str, invoices: Sequence[PendingInvoiceRef]) -> None:
        self._invoices[entity_id].extend(invoices)

    def get_transactions(self, entity_id: str, start: date, end: date) -> List[TransactionRecord]:
        selected = [t for t in self._transactions[entity_id] if start <= t.date <= end]
        return sorted(selected, key=lambda t: t.date)

    def get_pending_invoices(self, entity_id: str) -> List[PendingInvoiceRef]:
        return sorted(self._invoices[entity_id], key=lambda i: i.due_date)


class StaticMarketDataProvider(MarketDataProvider):
    """Fixed list of snapshots, e.g. loaded from configuration"""

    def __init__(self, snapshots: Optional[Sequence[MarketSnapshot]] = None):
        self._snapshots = list(snapshots or [])

    def get_snapshots(self) -> List[MarketSnapshot]:
        return sorted(self._snapshots, key=lambda s: s.date)


class InMemoryForecastSink(ForecastSink):
    """Keeps the latest forecast per scenario"""

    def __init__(self):
        self.forecasts: Dict[str, List[ForecastPoint]] = {}

    def save(self, scenario_id: str, points: Sequence[ForecastPoint]) -> int:
        self.forecasts.pop(scenario_id, None)
        self.forecasts[scenario_id] = list(points)
        return len(points)


class FredMarketDataProvider(MarketDataProvider):
    """
    Latest macro indicators from the FRED observations API.

    Each indicator is read as its most recent non-missing observation;
    the snapshot is dated with the newest of those observations.

    Example:
    ```python
    provider = FredMarketDataProvider(api_key=os.environ["FRED_API_KEY"])
    snapshots = provider.get_snapshots()
    ```
    """

    BASE_URL = "https://api.stlouisfed.org/fred/series/observations"

    REQUIRED_SERIES = {
        "interest_rate": "FEDFUNDS",          # Effective federal funds rate, %
        "inflation_rate": "FPCPITOTLZGUSA",   # CPI inflation, annual %
        "gdp_growth": "A191RL1Q225SBEA",      # Real GDP growth, annualized %
        "unemployment_rate": "UNRATE",        # Unemployment rate, %
    }

    OPTIONAL_SERIES = {
        "equity_index": "SP500",
        "fx_rate": "DEXUSEU",
    }

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None
    ):
        if not api_key:
            raise ValueError("FRED API key is required")
        self.api_key = api_key
        self.base_url = base_url or self.BASE_URL
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_snapshots(self) -> List[MarketSnapshot]:
        """
        Fetch one snapshot of current conditions.

        Raises:
            MarketDataError: A required indicator could not be read
        """
        values: Dict[str, float] = {}
        dates: List[date] = []

        for name, series_id in self.REQUIRED_SERIES.items():
            observed = self._latest_observation(series_id)
            if observed is None:
                raise MarketDataError(f"No observations for required series {series_id}")
            values[name], observed_date = observed
            dates.append(observed_date)

        optional: Dict[str, Optional[float]] = {}
        for name, series_id in self.OPTIONAL_SERIES.items():
            try:
                observed = self._latest_observation(series_id)
            except MarketDataError as e:
                logger.warning(f"Skipping optional series {series_id}: {e}")
                observed = None
            optional[name] = observed[0] if observed else None

        snapshot = MarketSnapshot(date=max(dates), **values, **optional)
        logger.info(f"Fetched FRED market snapshot for {snapshot.date.isoformat()}")
        return [snapshot]

    def _latest_observation(self, series_id: str) -> Optional[Tuple[float, date]]:
        """Most recent numeric observation of a series"""
        params = {
            "series_id": series_id,
            "api_key": self.api_key,
            "file_type": "json",
            "sort_order": "desc",
            "limit": 10
        }

        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            observations = response.json().get("observations", [])
        except (requests.RequestException, ValueError) as e:
            raise MarketDataError(f"Failed to fetch {series_id}: {e}") from e

        for observation in observations:
            raw = observation.get("value", ".")
            if raw in (".", "", None):  # FRED marks missing values with "."
                continue
            try:
                value = float(raw)
                observed_date = datetime.strptime(observation["date"], "%Y-%m-%d").date()
            except (KeyError, ValueError):
                logger.debug(f"Unparseable observation for {series_id}: {observation}")
                continue
            return value, observed_date

        return None
