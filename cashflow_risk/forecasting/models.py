"""
Forecast Data Model

Records consumed and produced by the forecasting engine: ledger
transactions, pending invoices, market snapshots, and the forecast
result objects handed back to callers.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Any, Optional
from enum import Enum


class TransactionKind(Enum):
    """Direction of a ledger transaction"""
    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def parse(cls, value: Any) -> 'TransactionKind':
        """Parse a kind from an enum, or a case-insensitive name/value."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for kind in cls:
            if text == kind.value:
                return kind
        raise ValueError(f"Unknown transaction kind: {value!r}")


@dataclass(frozen=True)
class RiskAdjustment:
    """Multipliers applied to a predicted figure to get its bounds"""
    conservative: float
    optimistic: float
    conservative_expense: float
    optimistic_expense: float


class RiskLevel(Enum):
    """Scenario-wide risk setting"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def adjustment(self) -> RiskAdjustment:
        """Conservative/optimistic asymmetry for this level."""
        return {
            RiskLevel.LOW: RiskAdjustment(0.95, 1.05, 1.05, 0.95),
            RiskLevel.MEDIUM: RiskAdjustment(0.85, 1.15, 1.15, 0.85),
            RiskLevel.HIGH: RiskAdjustment(0.70, 1.30, 1.30, 0.70),
        }[self]

    @classmethod
    def parse(cls, value: Any) -> 'RiskLevel':
        """Parse a risk level; anything unrecognised falls back to MEDIUM."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.MEDIUM


@dataclass(frozen=True)
class TransactionRecord:
    """A single observed ledger transaction"""
    date: date
    amount: float          # Magnitude; direction is carried by kind
    kind: TransactionKind
    description: str = ""
    counterparty: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "amount": self.amount,
            "kind": self.kind.value,
            "description": self.description,
            "counterparty": self.counterparty
        }


@dataclass(frozen=True)
class HistoricalPoint:
    """One observation of the series fed to the enhanced forecast"""
    date: date
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date.isoformat(), "amount": self.amount}


@dataclass
class RecurringItem:
    """Transaction pattern judged periodic"""
    signature: str
    description: str
    average_amount: float
    interval_days: float
    kind: TransactionKind
    last_occurrence: date
    occurrences: int
    confidence: float

    @property
    def cadence(self) -> str:
        return "weekly" if self.interval_days <= 10 else "monthly"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "signature": self.signature,
            "description": self.description,
            "average_amount": round(self.average_amount, 2),
            "interval_days": round(self.interval_days, 2),
            "cadence": self.cadence,
            "kind": self.kind.value,
            "last_occurrence": self.last_occurrence.isoformat(),
            "occurrences": self.occurrences,
            "confidence": round(self.confidence, 4)
        }


@dataclass
class PendingInvoiceRef:
    """Unpaid invoice expected to turn into cash"""
    amount: float
    due_date: date
    invoice_id: str = ""
    predicted_payment_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "invoice_id": self.invoice_id,
            "amount": self.amount,
            "due_date": self.due_date.isoformat(),
            "predicted_payment_date": (
                self.predicted_payment_date.isoformat()
                if self.predicted_payment_date else None
            )
        }


@dataclass
class SeasonalPattern:
    """Per-calendar-month deviation from the yearly average"""
    month: int             # 1-12
    multiplier: float
    confidence: float
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "multiplier": round(self.multiplier, 4),
            "confidence": round(self.confidence, 4),
            "label": self.label
        }


@dataclass
class MarketSnapshot:
    """Macro-economic indicators observed on one date (rates in percent)"""
    date: date
    interest_rate: float
    inflation_rate: float
    gdp_growth: float
    unemployment_rate: float
    equity_index: Optional[float] = None
    fx_rate: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "interest_rate": self.interest_rate,
            "inflation_rate": self.inflation_rate,
            "gdp_growth": self.gdp_growth,
            "unemployment_rate": self.unemployment_rate,
            "equity_index": self.equity_index,
            "fx_rate": self.fx_rate
        }


@dataclass
class ForecastBand:
    """Predicted figure with its scenario bounds"""
    predicted: float
    conservative: float
    optimistic: float
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "predicted": round(self.predicted, 2),
            "conservative": round(self.conservative, 2),
            "optimistic": round(self.optimistic, 2),
            "confidence": round(self.confidence, 4)
        }


@dataclass
class ForecastPoint:
    """
    Net cash flow forecast for one period.

    conservative/optimistic bracket predicted directionally; they are not
    strictly ordered once income and expense uncertainty are combined.
    """
    period_index: int
    month: date
    predicted: float
    conservative: float
    optimistic: float
    confidence: float
    factors: List[str] = field(default_factory=list)
    risks: List[str] = field(default_factory=list)
    income: Optional[ForecastBand] = None
    expenses: Optional[ForecastBand] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period_index": self.period_index,
            "month": self.month.isoformat(),
            "predicted": round(self.predicted, 2),
            "conservative": round(self.conservative, 2),
            "optimistic": round(self.optimistic, 2),
            "confidence": round(self.confidence, 4),
            "factors": self.factors,
            "risks": self.risks,
            "income": self.income.to_dict() if self.income else None,
            "expenses": self.expenses.to_dict() if self.expenses else None
        }


@dataclass
class ConfidenceInterval:
    """Symmetric band around a point forecast"""
    lower: float
    upper: float
    confidence_level: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lower": round(self.lower, 2),
            "upper": round(self.upper, 2),
            "confidence_level": self.confidence_level
        }


@dataclass
class MonteCarloResult:
    """Empirical distribution of simulated final values"""
    path_values: List[float]
    percentiles: Dict[str, float]
    mean: float
    std_dev: float
    probability_of_negative: float
    simulation_count: int

    def to_dict(self, include_paths: bool = False) -> Dict[str, Any]:
        result = {
            "percentiles": {k: round(v, 2) for k, v in self.percentiles.items()},
            "mean": round(self.mean, 2),
            "std_dev": round(self.std_dev, 2),
            "probability_of_negative": round(self.probability_of_negative, 4),
            "simulation_count": self.simulation_count
        }
        if include_paths:
            result["path_values"] = self.path_values
        return result


@dataclass
class AccuracyMetrics:
    """Backtest accuracy of the forecasting method"""
    mape: float
    rmse: float
    r2: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mape": round(self.mape, 4),
            "rmse": round(self.rmse, 4),
            "r2": round(self.r2, 4)
        }


@dataclass
class EnhancedForecast:
    """Composite result of one enhanced forecast run"""
    base_forecast: List[float]
    confidence_intervals: List[ConfidenceInterval]
    seasonal_adjustments: List[SeasonalPattern]
    monte_carlo: MonteCarloResult
    market_factors: List[MarketSnapshot]
    accuracy: AccuracyMetrics
    recommendations: List[str]
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_forecast": [round(v, 2) for v in self.base_forecast],
            "confidence_intervals": [ci.to_dict() for ci in self.confidence_intervals],
            "seasonal_adjustments": [p.to_dict() for p in self.seasonal_adjustments],
            "monte_carlo": self.monte_carlo.to_dict(),
            "market_factors": [m.to_dict() for m in self.market_factors],
            "accuracy": self.accuracy.to_dict(),
            "recommendations": self.recommendations,
            "metadata": self.metadata
        }


@dataclass
class ScenarioAssumptions:
    """Scenario overrides supplied by the planning configuration"""
    scenario_id: str = "baseline"
    risk_level: RiskLevel = RiskLevel.MEDIUM
    revenue_growth_pct: float = 0.0
    cost_inflation_pct: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScenarioAssumptions':
        return cls(
            scenario_id=str(data.get("scenario_id", data.get("id", "baseline"))),
            risk_level=RiskLevel.parse(data.get("risk_level", data.get("riskLevel", "MEDIUM"))),
            revenue_growth_pct=float(data.get("revenue_growth_pct", data.get("revenueGrowth", 0)) or 0),
            cost_inflation_pct=float(data.get("cost_inflation_pct", data.get("costInflation", 0)) or 0)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenario_id": self.scenario_id,
            "risk_level": self.risk_level.value,
            "revenue_growth_pct": self.revenue_growth_pct,
            "cost_inflation_pct": self.cost_inflation_pct
        }


@dataclass
class ForecastInput:
    """
    Everything the monthly scenario forecast reads.

    seasonal_patterns is an optional caller-supplied table (for example from
    trend_analyzer.seasonal_patterns). HistoricalDataAggregator leaves it
    unset: historical_average already averages per calendar month, so the
    seasonal factor is 1.0 unless a table is passed in.
    """
    transactions: List[TransactionRecord]
    pending_invoices: List[PendingInvoiceRef] = field(default_factory=list)
    recurring_items: List[RecurringItem] = field(default_factory=list)
    seasonal_patterns: Optional[List[SeasonalPattern]] = None
