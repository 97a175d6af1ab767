# src/wfm_erlang/solver.py
from __future__ import annotations

import logging
import math
from typing import Callable, Optional, TypeAlias

from .config import DEFAULT_SETTINGS, EngineSettings

logger = logging.getLogger(__name__)

# service_level_at(agents) -> achieved service level in [0, 1]
ServiceLevelFn: TypeAlias = Callable[[int], float]


def search_horizon(traffic: float, settings: EngineSettings = DEFAULT_SETTINGS) -> int:
    """Largest agent count the search will try."""
    horizon = int(math.ceil(traffic * settings.search_horizon_factor))
    if traffic < 1.0:
        horizon = max(settings.min_search_horizon, horizon)
    return horizon


def solve_agents(
    service_level_at: ServiceLevelFn,
    traffic: float,
    target_service_level: float,
    max_occupancy: float = 1.0,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> Optional[int]:
    """
    Find minimum N such that service_level_at(N) >= target, with
    occupancy = traffic / N <= max_occupancy.

    Linear scan from ceil(traffic / max_occupancy) up to search_horizon(traffic).
    It never starts below floor(traffic) + 1, the smallest stable queue, so a
    zero target still gets finite ASA.
    Service level with abandonment is not strictly monotone near the stability
    boundary, so this does not bisect.

    Returns:
      0     if there is no load,
      None  if no N within the horizon meets the target.
    """
    if traffic <= 0:
        return 0
    if max_occupancy <= 0:
        raise ValueError("max_occupancy must be > 0")

    low = max(int(math.ceil(traffic / min(float(max_occupancy), 1.0))), int(math.floor(traffic)) + 1)
    high = search_horizon(traffic, settings)

    for n in range(low, high + 1):
        if service_level_at(n) >= target_service_level:
            logger.debug("solved agents=%d for traffic=%.4f target=%.4f", n, traffic, target_service_level)
            return n

    logger.info(
        "target service level %.4f unachievable for traffic=%.4f within %d..%d agents",
        target_service_level,
        traffic,
        low,
        high,
    )
    return None


__all__ = [
    "ServiceLevelFn",
    "search_horizon",
    "solve_agents",
]
