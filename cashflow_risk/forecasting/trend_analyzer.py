"""
Trend & Seasonal Model

Shared trend and seasonality calculations used by both the monthly
scenario forecast and the enhanced (risk-quantified) forecast, plus a
descriptive analyzer reported alongside forecast results.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Any, Optional, Sequence, Tuple
from enum import Enum
import numpy as np

from .confidence import calculate_returns, calculate_volatility
from .models import SeasonalPattern, TransactionKind, TransactionRecord

logger = logging.getLogger(__name__)

SEASON_LABELS = [
    "Winter", "Winter", "Spring", "Spring", "Spring", "Summer",
    "Summer", "Summer", "Fall", "Fall", "Fall", "Winter"
]

TREND_WINDOW = 3  # Periods per moving-average window


def historical_average(
    transactions: Sequence[TransactionRecord],
    month: int,
    kind: TransactionKind
) -> float:
    """
    Annualized average of same-calendar-month transactions of one kind.

    Args:
        transactions: Ledger history
        month: Target calendar month (1-12)
        kind: Income or expense

    Returns:
        Mean amount x 12, or 0 when nothing matches
    """
    amounts = [t.amount for t in transactions if t.kind == kind and t.date.month == month]
    if not amounts:
        return 0.0
    return float(np.mean(amounts)) * 12


def trend_factor(transactions: Sequence[TransactionRecord], kind: TransactionKind) -> float:
    """
    Ratio of the latest 3-period average to the 3 periods before it.

    Neutral (1.0) with fewer than 6 points or a zero prior average.
    """
    relevant = sorted((t for t in transactions if t.kind == kind), key=lambda t: t.date)
    if len(relevant) < TREND_WINDOW * 2:
        return 1.0

    amounts = [t.amount for t in relevant]
    recent = np.mean(amounts[-TREND_WINDOW:])
    previous = np.mean(amounts[-TREND_WINDOW * 2:-TREND_WINDOW])

    if previous == 0:
        return 1.0
    return float(recent / previous)


def linear_slope(values: Sequence[float]) -> float:
    """Least-squares slope of values against their index"""
    n = len(values)
    if n < 2:
        return 0.0

    x = np.arange(n, dtype=float)
    y = np.asarray(values, dtype=float)
    denominator = np.sum((x - x.mean()) ** 2)
    if denominator == 0:
        return 0.0
    return float(np.sum((x - x.mean()) * (y - y.mean())) / denominator)


def linear_forecast(values: Sequence[float], horizon: int) -> List[float]:
    """
    Project mean + slope * step for each of the next horizon steps.

    Negative projections are floored at 0; empty history yields zeros.
    """
    if horizon <= 0:
        return []
    if not values:
        return [0.0] * horizon

    average = float(np.mean(values))
    slope = linear_slope(values)
    return [max(0.0, average + slope * step) for step in range(1, horizon + 1)]


def seasonal_patterns(values: Sequence[float], dates: Sequence[date]) -> List[SeasonalPattern]:
    """
    Per-month multipliers relative to the overall average.

    Always returns 12 entries. Months with no samples fall back to the
    overall average (multiplier 1, confidence 0).
    """
    by_month: Dict[int, List[float]] = {m: [] for m in range(1, 13)}
    for d, value in zip(dates, values):
        by_month[d.month].append(value)

    overall = float(np.mean(values)) if len(values) else 0.0

    patterns = []
    for month in range(1, 13):
        samples = by_month[month]
        month_avg = float(np.mean(samples)) if samples else overall

        if overall == 0:
            multiplier = 1.0
        else:
            multiplier = max(0.0, month_avg / overall)

        patterns.append(SeasonalPattern(
            month=month,
            multiplier=multiplier,
            confidence=min(len(samples) / 3, 1.0),
            label=SEASON_LABELS[month - 1]
        ))

    return patterns


def seasonal_factor(month: int, patterns: Sequence[SeasonalPattern] = None) -> float:
    """Multiplier for a calendar month, 1.0 when no table is supplied"""
    if not patterns:
        return 1.0
    for pattern in patterns:
        if pattern.month == month:
            return pattern.multiplier
    return 1.0


class TrendDirection(Enum):
    """Direction of trend"""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    VOLATILE = "volatile"


@dataclass
class TrendResult:
    """Descriptive profile of the cash flow history behind a forecast"""
    metric_name: str
    direction: TrendDirection
    slope: float
    r_squared: float
    return_volatility: float
    peak_month: Optional[int]
    trough_month: Optional[int]
    seasonal_swing: float  # peak multiplier minus trough multiplier
    negative_periods: int
    max_drawdown: float
    insights: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metric_name": self.metric_name,
            "direction": self.direction.value,
            "slope": self.slope,
            "r_squared": self.r_squared,
            "return_volatility": self.return_volatility,
            "peak_month": self.peak_month,
            "trough_month": self.trough_month,
            "seasonal_swing": self.seasonal_swing,
            "negative_periods": self.negative_periods,
            "max_drawdown": self.max_drawdown,
            "insights": self.insights
        }


class TrendAnalyzer:
    """
    Profiles the history behind a forecast.

    Uses the same slope, seasonal table and return volatility the forecast
    itself is built from, so the reported profile explains the forecast.

    Example:
    ```python
    analyzer = TrendAnalyzer()

    result = analyzer.analyze(
        values=[52000, 48000, 61000, 57000, 65000, 59000],
        dates=[date1, date2, ...],
        metric_name="net cash flow"
    )

    print(result.direction.value, result.peak_month, result.max_drawdown)
    ```
    """

    def __init__(self, volatile_threshold: float = 0.3, stable_slope_ratio: float = 0.01):
        """
        Initialize analyzer.

        Args:
            volatile_threshold: Return volatility above which a series is VOLATILE
            stable_slope_ratio: |slope| below this share of |mean| counts as STABLE
        """
        self.volatile_threshold = volatile_threshold
        self.stable_slope_ratio = stable_slope_ratio

    def analyze(
        self,
        values: Sequence[float],
        dates: Sequence[date],
        metric_name: str = "metric"
    ) -> TrendResult:
        """Profile direction, seasonality, volatility and shortfalls of a series"""
        if len(values) < 3:
            logger.debug(f"{metric_name}: {len(values)} points, too few to profile")
            return self._minimal_result(metric_name)

        slope = linear_slope(values)
        r_squared = self._fit_quality(values, slope)
        volatility = calculate_volatility(calculate_returns(values))
        direction = self._direction(values, slope, volatility)
        peak_month, trough_month, swing = self._seasonal_extremes(seasonal_patterns(values, dates))
        negative_periods = sum(1 for v in values if v < 0)
        drawdown = self._max_drawdown(values)

        result = TrendResult(
            metric_name=metric_name,
            direction=direction,
            slope=round(slope, 4),
            r_squared=round(r_squared, 4),
            return_volatility=round(volatility, 4),
            peak_month=peak_month,
            trough_month=trough_month,
            seasonal_swing=round(swing, 4),
            negative_periods=negative_periods,
            max_drawdown=round(drawdown, 2),
            insights=[]
        )
        result.insights = self._generate_insights(result, len(values))
        return result

    def _fit_quality(self, values: Sequence[float], slope: float) -> float:
        """r² of the least-squares line the linear forecast extrapolates"""
        y = np.asarray(values, dtype=float)
        x = np.arange(len(y), dtype=float)
        fitted = y.mean() + slope * (x - x.mean())

        ss_tot = np.sum((y - y.mean()) ** 2)
        if ss_tot == 0:
            return 0.0
        return float(1 - np.sum((y - fitted) ** 2) / ss_tot)

    def _direction(self, values: Sequence[float], slope: float, volatility: float) -> TrendDirection:
        if volatility > self.volatile_threshold:
            return TrendDirection.VOLATILE
        if abs(slope) < abs(float(np.mean(values))) * self.stable_slope_ratio:
            return TrendDirection.STABLE
        return TrendDirection.INCREASING if slope > 0 else TrendDirection.DECREASING

    def _seasonal_extremes(self, patterns: Sequence[SeasonalPattern]) -> Tuple[Optional[int], Optional[int], float]:
        """Strongest and weakest observed calendar months"""
        observed = [p for p in patterns if p.confidence > 0]
        if len(observed) < 2:
            return None, None, 0.0

        peak = max(observed, key=lambda p: p.multiplier)
        trough = min(observed, key=lambda p: p.multiplier)
        return peak.month, trough.month, peak.multiplier - trough.multiplier

    def _max_drawdown(self, values: Sequence[float]) -> float:
        """Largest fall from a running high to a later value"""
        running_high = np.maximum.accumulate(np.asarray(values, dtype=float))
        return float(np.max(running_high - values))

    def _generate_insights(self, result: TrendResult, periods: int) -> List[str]:
        insights = []
        name = result.metric_name

        if result.direction == TrendDirection.INCREASING:
            insights.append(f"{name} is growing by {abs(result.slope):,.0f} per period")
        elif result.direction == TrendDirection.DECREASING:
            insights.append(f"{name} is shrinking by {abs(result.slope):,.0f} per period")
        elif result.direction == TrendDirection.VOLATILE:
            insights.append(
                f"{name} swings {result.return_volatility:.0%} period to period; hold a larger cash buffer"
            )
        else:
            insights.append(f"{name} is broadly flat")

        if result.peak_month is not None and result.seasonal_swing > 0.2:
            insights.append(
                f"Strongest month is {calendar.month_name[result.peak_month]}, "
                f"weakest is {calendar.month_name[result.trough_month]}"
            )

        if result.negative_periods:
            insights.append(f"{result.negative_periods} of {periods} periods were cash negative")

        if result.max_drawdown > 0 and result.direction != TrendDirection.INCREASING:
            insights.append(f"Largest decline from a prior high was {result.max_drawdown:,.0f}")

        return insights

    def _minimal_result(self, metric_name: str) -> TrendResult:
        return TrendResult(
            metric_name=metric_name,
            direction=TrendDirection.STABLE,
            slope=0.0,
            r_squared=0.0,
            return_volatility=0.0,
            peak_month=None,
            trough_month=None,
            seasonal_swing=0.0,
            negative_periods=0,
            max_drawdown=0.0,
            insights=["Insufficient data for trend analysis"]
        )
