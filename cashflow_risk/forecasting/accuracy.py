"""
Accuracy Evaluator

Scores forecasts against actuals with MAPE, RMSE and R-squared.
"""

import logging
from typing import Callable, List, Sequence
import numpy as np

from .models import AccuracyMetrics

logger = logging.getLogger(__name__)


def evaluate(actual: Sequence[float], predicted: Sequence[float]) -> AccuracyMetrics:
    """
    Compare paired actual/predicted values.

    MAPE skips periods where the actual is 0; R-squared is 0 when the
    actuals have no variance. Fewer than 2 pairs scores all zeros.
    """
    n = min(len(actual), len(predicted))
    if n < 2:
        return AccuracyMetrics(mape=0.0, rmse=0.0, r2=0.0)

    a = np.asarray(actual[:n], dtype=float)
    p = np.asarray(predicted[:n], dtype=float)
    errors = a - p

    nonzero = a != 0
    if np.any(nonzero):
        mape = float(np.mean(np.abs(errors[nonzero] / a[nonzero])) * 100)
    else:
        mape = 0.0

    rmse = float(np.sqrt(np.mean(errors ** 2)))

    ss_res = np.sum(errors ** 2)
    ss_tot = np.sum((a - a.mean()) ** 2)
    r2 = float(1 - ss_res / ss_tot) if ss_tot > 0 else 0.0

    return AccuracyMetrics(mape=mape, rmse=rmse, r2=r2)


def backtest(
    values: Sequence[float],
    horizon: int,
    forecast_fn: Callable[[Sequence[float], int], List[float]]
) -> AccuracyMetrics:
    """
    Re-run a forecasting method over already-elapsed periods.

    The trailing min(horizon, n - 1) values are held out, forecast from
    the values before them, and scored against what actually happened.

    Args:
        values: Historical series, oldest first
        horizon: Forecast horizon
        forecast_fn: Callable(history, steps) -> forecast values

    Returns:
        AccuracyMetrics (all zeros with fewer than 2 values)
    """
    if len(values) < 2 or horizon < 1:
        return AccuracyMetrics(mape=0.0, rmse=0.0, r2=0.0)

    holdout = min(horizon, len(values) - 1)
    training = list(values[:-holdout])
    actual = list(values[-holdout:])
    predicted = forecast_fn(training, holdout)

    logger.debug(f"Backtesting {holdout} periods from {len(training)} training values")
    return evaluate(actual, predicted)
