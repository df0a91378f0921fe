"""
Boundary validation for records entering the forecasting engine.

Upstream systems hand over dicts, dataclasses or ORM rows. Everything is
normalized here so the numeric core only ever sees clean records.
"""

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, List

from ..forecasting.models import (
    HistoricalPoint, PendingInvoiceRef, TransactionKind, TransactionRecord
)


class ValidationError(ValueError):
    """Malformed input record"""

    def __init__(self, message: str, index: int = None, field: str = None):
        self.index = index
        self.field = field
        location = []
        if index is not None:
            location.append(f"record {index}")
        if field:
            location.append(f"field '{field}'")
        prefix = f"{', '.join(location)}: " if location else ""
        super().__init__(f"{prefix}{message}")


def _get(record: Any, *names: str, default: Any = None) -> Any:
    """Read the first present attribute/key among names"""
    for name in names:
        if isinstance(record, dict):
            if name in record:
                return record[name]
        elif hasattr(record, name):
            return getattr(record, name)
    return default


def parse_date(value: Any, index: int = None, field: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
        except ValueError:
            pass
    raise ValidationError(f"malformed date {value!r}", index, field)


def parse_amount(value: Any, index: int = None, field: str = "amount") -> float:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"non-numeric amount {value!r}", index, field)
    if isinstance(value, (int, float, Decimal)):
        amount = float(value)
    elif isinstance(value, str):
        try:
            amount = float(value.strip())
        except ValueError:
            raise ValidationError(f"non-numeric amount {value!r}", index, field)
    else:
        raise ValidationError(f"non-numeric amount {value!r}", index, field)

    if not math.isfinite(amount):
        raise ValidationError(f"non-finite amount {value!r}", index, field)
    return amount


def parse_historical_points(records: Iterable[Any]) -> List[HistoricalPoint]:
    """Validate {date, amount} records, ordered by date"""
    points = []
    for i, record in enumerate(records):
        if isinstance(record, HistoricalPoint):
            points.append(record)
            continue
        points.append(HistoricalPoint(
            date=parse_date(_get(record, "date"), i),
            amount=parse_amount(_get(record, "amount"), i)
        ))
    return sorted(points, key=lambda p: p.date)


def parse_transaction(record: Any, index: int = None) -> TransactionRecord:
    """
    Validate one ledger transaction.

    A record without an explicit kind is classified by the sign of its
    amount; amounts are stored as magnitudes.
    """
    if isinstance(record, TransactionRecord):
        return record

    amount = parse_amount(_get(record, "amount"), index)
    raw_kind = _get(record, "kind", "type", "entry_type")
    if raw_kind is None:
        kind = TransactionKind.EXPENSE if amount < 0 else TransactionKind.INCOME
    else:
        try:
            kind = TransactionKind.parse(raw_kind)
        except ValueError as e:
            raise ValidationError(str(e), index, "kind")

    return TransactionRecord(
        date=parse_date(_get(record, "date", "entry_date"), index),
        amount=abs(amount),
        kind=kind,
        description=str(_get(record, "description", default="") or ""),
        counterparty=str(_get(record, "counterparty", default="") or "")
    )


def parse_transactions(records: Iterable[Any]) -> List[TransactionRecord]:
    return [parse_transaction(record, i) for i, record in enumerate(records)]


def parse_invoice(record: Any, index: int = None) -> PendingInvoiceRef:
    if isinstance(record, PendingInvoiceRef):
        return record

    due = _get(record, "due_date", "dueDate")
    if due is None:
        due = _get(record, "invoice_date", "invoiceDate")

    return PendingInvoiceRef(
        amount=parse_amount(_get(record, "amount", "total_amount", "totalAmount"), index),
        due_date=parse_date(due, index, "due_date"),
        invoice_id=str(_get(record, "invoice_id", "id", default="") or "")
    )


def parse_invoices(records: Iterable[Any]) -> List[PendingInvoiceRef]:
    return [parse_invoice(record, i) for i, record in enumerate(records)]

