"""
Confidence Interval Calculator

Volatility estimation from historical period-over-period returns and
horizon-widening symmetric bands around a forecast.
"""

import logging
from typing import List, Sequence
import numpy as np

from .models import ConfidenceInterval

logger = logging.getLogger(__name__)

DEFAULT_VOLATILITY = 0.1
DEFAULT_Z_SCORE = 1.96

Z_SCORES = {
    0.90: 1.645,
    0.95: 1.96,
    0.99: 2.576,
}


def calculate_returns(values: Sequence[float]) -> List[float]:
    """Period-over-period returns, skipping zero predecessors"""
    returns = []
    for previous, current in zip(values, values[1:]):
        if previous != 0:
            returns.append((current - previous) / previous)
    return returns


def calculate_volatility(returns: Sequence[float]) -> float:
    """Sample standard deviation of returns (0.1 with fewer than 2)"""
    if len(returns) < 2:
        logger.debug(f"Only {len(returns)} returns, using default volatility {DEFAULT_VOLATILITY}")
        return DEFAULT_VOLATILITY
    return float(np.std(returns, ddof=1))


def mean_return(returns: Sequence[float]) -> float:
    if not returns:
        return 0.0
    return float(np.mean(returns))


def z_score(confidence_level: float) -> float:
    """Two-sided z-score for a supported level, 1.96 otherwise"""
    for level, z in Z_SCORES.items():
        if np.isclose(confidence_level, level):
            return z
    logger.warning(f"Unsupported confidence level {confidence_level}, using z={DEFAULT_Z_SCORE}")
    return DEFAULT_Z_SCORE


class ConfidenceIntervalCalculator:
    """
    Builds a confidence band per forecast step.

    The margin grows 10% per step to reflect horizon uncertainty:
    margin = value x volatility x z x (1 + 0.1 x step).
    """

    def __init__(self, horizon_widening: float = 0.1):
        self.horizon_widening = horizon_widening

    def calculate(
        self,
        forecast: Sequence[float],
        history: Sequence[float],
        confidence_level: float = 0.95
    ) -> List[ConfidenceInterval]:
        """
        Args:
            forecast: Forecast values
            history: Historical values the volatility is estimated from
            confidence_level: 0.90, 0.95 or 0.99

        Returns:
            One interval per forecast value, lower bound floored at 0
        """
        volatility = calculate_volatility(calculate_returns(history))
        z = z_score(confidence_level)

        intervals = []
        for step, value in enumerate(forecast):
            margin = abs(value * volatility * z * (1 + step * self.horizon_widening))
            lower = max(0.0, value - margin)
            upper = max(lower, value + margin)
            intervals.append(ConfidenceInterval(
                lower=lower,
                upper=upper,
                confidence_level=confidence_level
            ))

        return intervals
