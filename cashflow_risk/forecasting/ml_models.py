"""
Forecast Model Interface

Pluggable model seam for the base forecast stage. A model is trained
under an id and later asked for predictions by that id.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Any, Sequence
import numpy as np

from .accuracy import evaluate

logger = logging.getLogger(__name__)


class ModelNotFoundError(KeyError):
    """Prediction requested for a model id that was never trained"""


@dataclass
class ModelConfig:
    """Training request for a forecast model"""
    model_type: str
    training_data: List[float]
    validation_data: List[float] = field(default_factory=list)
    parameters: Dict[str, Any] = field(default_factory=dict)


class ForecastModel(ABC):
    """Strategy interface for trainable forecast models"""

    @abstractmethod
    def train(self, model_id: str, config: ModelConfig) -> float:
        """Fit a model and return its accuracy in [0, 1]"""

    @abstractmethod
    def predict(self, model_id: str, data: Sequence[float], horizon: int) -> List[float]:
        """Forecast horizon values following data"""

    def available_models(self) -> List[str]:
        return []


@dataclass
class _LinearFit:
    slope: float
    intercept: float
    accuracy: float


class LinearTrendModel(ForecastModel):
    """
    Least-squares linear trend.

    Predictions continue the fitted slope from the level of the data the
    prediction is asked for, floored at 0.
    """

    model_type = "linear_regression"

    def __init__(self):
        self._fits: Dict[str, _LinearFit] = {}

    def train(self, model_id: str, config: ModelConfig) -> float:
        """
        Fit slope and intercept on the training data.

        Accuracy is R-squared of the fit on the validation data (or the
        training data when none is given), clipped to [0, 1].
        """
        y = np.asarray(config.training_data, dtype=float)
        if len(y) < 2:
            raise ValueError("Need at least 2 training values to fit a trend")

        x = np.arange(len(y), dtype=float)
        slope, intercept = np.polyfit(x, y, 1)

        if config.validation_data:
            x_val = np.arange(len(y), len(y) + len(config.validation_data), dtype=float)
            actual = list(config.validation_data)
        else:
            x_val = x
            actual = list(y)

        fitted = slope * x_val + intercept
        r2 = evaluate(actual, fitted.tolist()).r2
        accuracy = float(min(1.0, max(0.0, r2)))

        self._fits[model_id] = _LinearFit(float(slope), float(intercept), accuracy)
        logger.info(f"Trained {self.model_type} model {model_id} (accuracy {accuracy:.3f})")
        return accuracy

    def predict(self, model_id: str, data: Sequence[float], horizon: int) -> List[float]:
        fit = self._fits.get(model_id)
        if fit is None:
            raise ModelNotFoundError(model_id)

        level = float(data[-1]) if len(data) else fit.intercept
        return [max(0.0, level + fit.slope * step) for step in range(1, horizon + 1)]

    def available_models(self) -> List[str]:
        return sorted(self._fits)
