# src/wfm_erlang/erlanga.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_SETTINGS, EngineSettings
from .erlangc import occupancy, wait_probability
from .solver import solve_agents as _search_agents


# -----------------------------
# Primitives (M/M/n+M)
# -----------------------------
def patience_ratio(average_patience_seconds: float, aht_seconds: float) -> float:
    """theta = average patience / AHT."""
    if aht_seconds <= 0 or average_patience_seconds <= 0:
        return 0.0
    return float(average_patience_seconds) / float(aht_seconds)


def abandonment_probability(agents: int, traffic: float, theta: float) -> float:
    """
    Probability an arriving contact abandons.

    A contact that must wait races its (exponential) patience against the
    queue clearance rate (n-a)/AHT. With theta = patience/AHT:

      P(abandon | wait) = 1 / (1 + (n-a) * theta)
      P(abandon)        = Pw * P(abandon | wait)
    """
    if traffic <= 0:
        return 0.0
    if agents <= traffic:
        return 1.0
    if theta <= 0:
        return 1.0

    pw = wait_probability(agents, traffic)
    p = pw / (1.0 + (agents - traffic) * float(theta))
    return max(0.0, min(1.0, float(p)))


def _queue_exit_rate(agents: int, traffic: float, aht_seconds: float, average_patience_seconds: float) -> float:
    # Waiting contacts leave the queue by being answered or by abandoning.
    return (agents - traffic) / float(aht_seconds) + 1.0 / float(average_patience_seconds)


def service_level_with_abandonment(
    agents: int,
    traffic: float,
    aht_seconds: float,
    threshold_seconds: float,
    average_patience_seconds: float,
) -> float:
    """
    Service level over answered contacts:

    SL(T) = 1 - Pw * exp(-gamma * T),  gamma = (n-a)/AHT + 1/patience

    Abandoned contacts drop out of the waiting tail, so this is never below
    the Erlang C service level at the same staffing.
    """
    if traffic <= 0 or aht_seconds <= 0:
        return 1.0
    if agents <= traffic:
        return 0.0
    if average_patience_seconds <= 0:
        # Nobody who would have waited stays to be answered.
        return 1.0

    T = max(float(threshold_seconds), 0.0)
    pw = wait_probability(agents, traffic)
    gamma = _queue_exit_rate(agents, traffic, aht_seconds, average_patience_seconds)
    sl = 1.0 - pw * math.exp(-gamma * T)
    return max(0.0, min(1.0, float(sl)))


def expected_abandonments(volume: float, agents: int, traffic: float, theta: float) -> float:
    if volume <= 0:
        return 0.0
    return float(volume) * abandonment_probability(agents, traffic, theta)


def average_wait_with_abandonment(
    agents: int,
    traffic: float,
    aht_seconds: float,
    average_patience_seconds: float,
) -> float:
    """
    ASA = Pw / gamma

    Same shape as Erlang C's Pw * AHT/(n-a), with abandonment adding to the
    rate at which the queue drains.
    """
    if traffic <= 0 or aht_seconds <= 0:
        return 0.0
    if agents <= traffic:
        return float("inf")
    if average_patience_seconds <= 0:
        return 0.0

    pw = wait_probability(agents, traffic)
    return float(pw) / _queue_exit_rate(agents, traffic, aht_seconds, average_patience_seconds)


# -----------------------------
# Staffing
# -----------------------------
def solve_agents(
    traffic: float,
    aht_seconds: float,
    target_service_level: float,
    threshold_seconds: float,
    max_occupancy: float,
    average_patience_seconds: float,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> Optional[int]:
    """Minimum agents meeting target SL under Erlang A; 0 for no load, None if unachievable."""
    if traffic <= 0 or aht_seconds <= 0:
        return 0
    return _search_agents(
        lambda n: service_level_with_abandonment(
            n, traffic, aht_seconds, threshold_seconds, average_patience_seconds
        ),
        traffic,
        target_service_level,
        max_occupancy,
        settings=settings,
    )


@dataclass(frozen=True)
class ErlangAMetrics:
    traffic_intensity: float
    theta: float
    required_agents: int
    service_level: float
    asa_seconds: float
    occupancy: float
    abandonment_probability: float
    expected_abandonments: float
    answered_contacts: float


def erlang_a_metrics(
    volume: float,
    traffic: float,
    aht_seconds: float,
    target_service_level: float,
    threshold_seconds: float,
    max_occupancy: float,
    average_patience_seconds: float,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> Optional[ErlangAMetrics]:
    n = solve_agents(
        traffic,
        aht_seconds,
        target_service_level,
        threshold_seconds,
        max_occupancy,
        average_patience_seconds,
        settings=settings,
    )
    if n is None:
        return None

    theta = patience_ratio(average_patience_seconds, aht_seconds)
    abandon = abandonment_probability(n, traffic, theta)
    abandoned = expected_abandonments(volume, n, traffic, theta)

    return ErlangAMetrics(
        traffic_intensity=float(traffic),
        theta=theta,
        required_agents=n,
        service_level=service_level_with_abandonment(
            n, traffic, aht_seconds, threshold_seconds, average_patience_seconds
        ),
        asa_seconds=average_wait_with_abandonment(n, traffic, aht_seconds, average_patience_seconds),
        occupancy=occupancy(traffic, n),
        abandonment_probability=abandon,
        expected_abandonments=abandoned,
        answered_contacts=max(float(volume), 0.0) - abandoned,
    )


__all__ = [
    "patience_ratio",
    "abandonment_probability",
    "service_level_with_abandonment",
    "expected_abandonments",
    "average_wait_with_abandonment",
    "solve_agents",
    "ErlangAMetrics",
    "erlang_a_metrics",
]
