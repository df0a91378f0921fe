"""
Recurring Pattern Detector

Groups ledger transactions by a normalized signature and keeps the
groups that repeat on a weekly or monthly cadence.
"""

import logging
import re
from collections import defaultdict
from typing import Dict, List, Sequence, Tuple
import numpy as np

from .models import RecurringItem, TransactionKind, TransactionRecord

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"\d+")
_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_description(description: str) -> str:
    """Lower-case, replace digit runs with 'x', strip punctuation"""
    text = _DIGITS.sub("x", (description or "").lower())
    text = _PUNCTUATION.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


class RecurringPatternDetector:
    """
    Finds periodic income and expense items in a transaction history.

    Example:
    ```python
    detector = RecurringPatternDetector()
    items = detector.detect(transactions)
    for item in items:
        print(f"{item.description}: {item.average_amount} every {item.interval_days:.0f} days")
    ```
    """

    # Accepted average intervals in days
    MONTHLY_RANGE = (28, 32)
    WEEKLY_RANGE = (7, 10)

    def __init__(
        self,
        amount_band: float = 100,
        min_occurrences: int = 3,
        full_confidence_occurrences: int = 12
    ):
        """
        Initialize detector.

        Args:
            amount_band: Width of the amount buckets used in the signature
            min_occurrences: Smallest group considered for recurrence
            full_confidence_occurrences: Occurrence count giving confidence 1.0
        """
        self.amount_band = amount_band
        self.min_occurrences = min_occurrences
        self.full_confidence_occurrences = full_confidence_occurrences

    def signature(self, transaction: TransactionRecord) -> Tuple[str, int, str]:
        """Grouping key: (normalized description, amount band, kind)"""
        band = int(np.floor(transaction.amount / self.amount_band) * self.amount_band)
        return normalize_description(transaction.description), band, transaction.kind.value

    def detect(self, transactions: Sequence[TransactionRecord]) -> List[RecurringItem]:
        """
        Detect recurring items.

        Args:
            transactions: Unordered transactions for one entity

        Returns:
            RecurringItems sorted by signature; empty when nothing repeats
        """
        groups: Dict[Tuple[str, int, str], List[TransactionRecord]] = defaultdict(list)
        for transaction in transactions:
            groups[self.signature(transaction)].append(transaction)

        items = []
        for key in sorted(groups):
            members = groups[key]
            if len(members) < self.min_occurrences:
                continue

            ordered = sorted(members, key=lambda t: t.date)
            intervals = [
                (ordered[i].date - ordered[i - 1].date).days
                for i in range(1, len(ordered))
            ]
            avg_interval = float(np.mean(intervals))

            if not self._is_periodic(avg_interval):
                continue

            description, band, kind = key
            items.append(RecurringItem(
                signature=f"{description}_{band}_{kind}",
                description=ordered[-1].description,
                average_amount=float(np.mean([t.amount for t in ordered])),
                interval_days=avg_interval,
                kind=TransactionKind(kind),
                last_occurrence=ordered[-1].date,
                occurrences=len(ordered),
                confidence=min(len(ordered) / self.full_confidence_occurrences, 1.0)
            ))

        logger.debug(f"Detected {len(items)} recurring items in {len(groups)} groups")
        return items

    def _is_periodic(self, avg_interval: float) -> bool:
        """Monthly or weekly cadence"""
        monthly_lo, monthly_hi = self.MONTHLY_RANGE
        weekly_lo, weekly_hi = self.WEEKLY_RANGE
        return monthly_lo <= avg_interval <= monthly_hi or weekly_lo <= avg_interval <= weekly_hi
