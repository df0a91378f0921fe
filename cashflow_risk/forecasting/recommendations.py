"""
Recommendation Generator

Rule-based advisories derived from the simulated outcome distribution,
forecast shape and historical accuracy.
"""

from typing import List, Sequence

from .models import AccuracyMetrics, MonteCarloResult

NEGATIVE_PROBABILITY_LIMIT = 0.10
DECLINE_RATIO = 0.80
MAPE_LIMIT = 20
R2_FLOOR = 0.5
GROWTH_THRESHOLD = 0.10
DECLINE_THRESHOLD = -0.05


def generate_recommendations(
    monte_carlo: MonteCarloResult,
    forecast: Sequence[float],
    accuracy: AccuracyMetrics
) -> List[str]:
    """Evaluate each advisory rule independently"""
    recommendations = []
    first = forecast[0] if forecast else 0.0

    # Risk
    if monte_carlo.probability_of_negative > NEGATIVE_PROBABILITY_LIMIT:
        recommendations.append(
            "High risk of negative cash flow detected. Consider securing additional funding."
        )

    if forecast and monte_carlo.percentiles.get("p25", 0.0) < first * DECLINE_RATIO:
        recommendations.append(
            "25% chance of significant cash flow decline. Review cost structure."
        )

    # Accuracy
    if accuracy.mape > MAPE_LIMIT:
        recommendations.append(
            "Forecast accuracy is low. Consider improving data quality or model parameters."
        )

    if accuracy.r2 < R2_FLOOR:
        recommendations.append(
            "Low model fit. Historical patterns may not be reliable predictors."
        )

    # Growth
    if first != 0:
        growth_rate = forecast[-1] / first - 1
        if growth_rate > GROWTH_THRESHOLD:
            recommendations.append(
                "Strong growth projected. Consider expansion opportunities."
            )
        elif growth_rate < DECLINE_THRESHOLD:
            recommendations.append(
                "Declining trend detected. Implement cost reduction measures."
            )

    return recommendations
