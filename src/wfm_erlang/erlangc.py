# src/wfm_erlang/erlangc.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_SETTINGS, EngineSettings
from .solver import solve_agents as _search_agents


def wait_probability(agents: int, traffic: float) -> float:
    """
    Erlang C probability of wait (Pw).

    Pw = [ (a^n / n!) * (n/(n-a)) ] / [ sum_{k=0..n-1} a^k/k! + (a^n/n!) * (n/(n-a)) ]

    Evaluated through the inverse Erlang B recurrence
      1/B(0) = 1,  1/B(k) = 1 + (k/a) * 1/B(k-1)
      1/Pw   = rho + (1 - rho) / B(n),  rho = a/n
    which needs no factorials and stays finite well past n = 170.

    Requires n > a for stability; unstable queues return 1.0.
    """
    if agents <= 0 or traffic <= 0:
        return 0.0
    if agents <= traffic:
        return 1.0

    a = float(traffic)
    inv_b = 1.0
    for k in range(1, int(agents) + 1):
        inv_b = 1.0 + (k / a) * inv_b

    rho = a / agents
    pw = 1.0 / (rho + (1.0 - rho) * inv_b)
    return max(0.0, min(1.0, float(pw)))


def service_level(agents: int, traffic: float, aht_seconds: float, threshold_seconds: float) -> float:
    """
    Service level for threshold T (seconds):

    SL(T) = 1 - Pw * exp(-(n-a) * (T / AHT))
    """
    if traffic <= 0 or aht_seconds <= 0:
        return 1.0
    if agents <= traffic:
        return 0.0

    T = max(float(threshold_seconds), 0.0)
    pw = wait_probability(agents, traffic)
    expo = math.exp(-(agents - traffic) * (T / float(aht_seconds)))
    sl = 1.0 - pw * expo
    # Clamp for safety
    return max(0.0, min(1.0, float(sl)))


def average_wait(agents: int, traffic: float, aht_seconds: float) -> float:
    """
    Average Speed of Answer (ASA) for M/M/n without abandonment.

    ASA = Pw * (AHT / (n-a))
    """
    if traffic <= 0 or aht_seconds <= 0:
        return 0.0
    if agents <= traffic:
        return float("inf")
    pw = wait_probability(agents, traffic)
    return float(pw) * float(aht_seconds) / float(agents - traffic)


def occupancy(traffic: float, agents: int) -> float:
    if agents <= 0 or traffic <= 0:
        return 0.0
    return min(1.0, float(traffic) / float(agents))


def fte(agents: float, shrinkage: float) -> float:
    """
    Paid headcount needed to keep `agents` on the phones:
      FTE = agents / (1 - shrinkage)
    Shrinkage of 100% or more makes any staffing level impossible.
    """
    s = max(float(shrinkage), 0.0)
    if s >= 1.0:
        return float("inf")
    return float(agents) / (1.0 - s)


def solve_agents(
    traffic: float,
    aht_seconds: float,
    target_service_level: float,
    threshold_seconds: float,
    max_occupancy: float = 1.0,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> Optional[int]:
    """Minimum agents meeting target SL under Erlang C; 0 for no load, None if unachievable."""
    if traffic <= 0 or aht_seconds <= 0:
        return 0
    return _search_agents(
        lambda n: service_level(n, traffic, aht_seconds, threshold_seconds),
        traffic,
        target_service_level,
        max_occupancy,
        settings=settings,
    )


@dataclass(frozen=True)
class ErlangCMetrics:
    traffic_intensity: float
    required_agents: int
    service_level: float
    asa_seconds: float
    occupancy: float


def erlang_c_metrics(
    traffic: float,
    aht_seconds: float,
    target_service_level: float,
    threshold_seconds: float,
    max_occupancy: float = 1.0,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> Optional[ErlangCMetrics]:
    n = solve_agents(
        traffic,
        aht_seconds,
        target_service_level,
        threshold_seconds,
        max_occupancy,
        settings=settings,
    )
    if n is None:
        return None

    return ErlangCMetrics(
        traffic_intensity=float(traffic),
        required_agents=n,
        service_level=service_level(n, traffic, aht_seconds, threshold_seconds),
        asa_seconds=average_wait(n, traffic, aht_seconds),
        occupancy=occupancy(traffic, n),
    )


__all__ = [
    "wait_probability",
    "service_level",
    "average_wait",
    "occupancy",
    "fte",
    "solve_agents",
    "ErlangCMetrics",
    "erlang_c_metrics",
]
