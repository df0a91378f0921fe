"""
Market Factor Adjuster

Scales a forecast by macro-economic conditions taken from the most
recent market snapshot.
"""

import logging
from typing import Dict, List, Optional, Sequence

from .models import MarketSnapshot

logger = logging.getLogger(__name__)

NEUTRAL_INTEREST_RATE = 3.0
NEUTRAL_UNEMPLOYMENT_RATE = 3.0


def latest_snapshot(snapshots: Sequence[MarketSnapshot]) -> Optional[MarketSnapshot]:
    """Most recent snapshot by date, or None"""
    if not snapshots:
        return None
    return max(snapshots, key=lambda s: s.date)


def market_impact(snapshot: MarketSnapshot) -> Dict[str, float]:
    """
    Per-factor multipliers and their product.

    Higher rates and unemployment reduce cash flow; inflation and GDP
    growth raise nominal cash flow.
    """
    interest = 1 - (snapshot.interest_rate - NEUTRAL_INTEREST_RATE) * 0.01
    inflation = 1 + snapshot.inflation_rate * 0.01
    gdp = 1 + snapshot.gdp_growth * 0.005
    unemployment = 1 - (snapshot.unemployment_rate - NEUTRAL_UNEMPLOYMENT_RATE) * 0.02

    return {
        "interest_rate_impact": interest,
        "inflation_impact": inflation,
        "gdp_impact": gdp,
        "unemployment_impact": unemployment,
        "combined_impact": interest * inflation * gdp * unemployment
    }


def apply_market_factors(
    forecast: Sequence[float],
    snapshots: Sequence[MarketSnapshot]
) -> List[float]:
    """
    Multiply every forecast value by the combined market impact.

    Without market data the forecast is returned unchanged.
    """
    snapshot = latest_snapshot(snapshots)
    if snapshot is None:
        return list(forecast)

    combined = market_impact(snapshot)["combined_impact"]
    logger.debug(f"Applying market impact {combined:.4f} from snapshot {snapshot.date.isoformat()}")
    return [value * combined for value in forecast]
