# src/wfm_erlang/erlangx.py
"""
Erlang X: abandonment plus retrials.

Abandoned contacts may call back, which inflates the offered load. The
virtual traffic (base load plus retrials) and the abandonment rate depend on
each other, so the pair is solved by fixed-point iteration.

  A_virtual = A / (1 - p_abandon * p_retry)
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_SETTINGS, EngineSettings
from .erlangc import average_wait, occupancy, wait_probability
from .solver import solve_agents as _search_agents

logger = logging.getLogger(__name__)


# -----------------------------
# Retrials
# -----------------------------
def retrial_probability(
    average_wait_seconds: float,
    average_patience_seconds: float,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> float:
    """
    Share of abandoned contacts that call back.

    Empirical and saturating: grows with frustration = min(wait / patience, 2)
    from the base rate (40%) up to the max rate (70%).
    """
    wait = max(float(average_wait_seconds), 0.0)
    if average_patience_seconds <= 0:
        frustration = settings.max_frustration if wait > 0 else 0.0
    else:
        frustration = min(wait / float(average_patience_seconds), settings.max_frustration)

    return min(
        settings.base_retrial_rate + frustration * settings.retrial_slope,
        settings.max_retrial_rate,
    )


def virtual_traffic(
    base_traffic: float,
    abandonment_rate: float,
    retrial_probability: float,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> float:
    """Offered load including retrials; inf once the retrial loop feeds on itself."""
    feedback = float(abandonment_rate) * float(retrial_probability)
    if feedback >= settings.feedback_instability:
        return float("inf")
    if base_traffic <= 0:
        return 0.0
    return float(base_traffic) / (1.0 - feedback)


# -----------------------------
# Abandonment
# -----------------------------
def abandonment_rate_x(
    agents: int,
    traffic: float,
    aht_seconds: float,
    average_patience_seconds: float,
    patience_shape: Optional[float] = None,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> float:
    """
    Fraction of contacts that abandon, with Weibull patience:

      W          = Pw * AHT / (n-a)
      P(abandon) = Pw * [1 - exp(-(W / patience)^shape)]

    shape > 1 means patience wears thin faster than exponential.
    """
    if traffic <= 0 or aht_seconds <= 0:
        return 0.0
    if agents <= traffic:
        return 1.0

    pw = wait_probability(agents, traffic)
    if pw <= 0:
        return 0.0
    if average_patience_seconds <= 0:
        return pw

    shape = settings.patience_shape if patience_shape is None else float(patience_shape)
    avg_wait = pw * float(aht_seconds) / float(agents - traffic)
    ratio = avg_wait / float(average_patience_seconds)
    abandon_given_wait = 1.0 - math.exp(-(ratio**shape))
    return max(0.0, min(1.0, pw * abandon_given_wait))


def _abandonment_at_load(
    agents: int,
    load: float,
    aht_seconds: float,
    average_patience_seconds: float,
    settings: EngineSettings,
) -> float:
    if load >= agents:
        # Overloaded: the agents answer at most `agents` Erlangs, the excess abandons.
        return 1.0 - float(agents) / float(load)
    return abandonment_rate_x(agents, load, aht_seconds, average_patience_seconds, settings=settings)


def _wait_at_load(agents: int, load: float, aht_seconds: float) -> float:
    return wait_probability(agents, load) * float(aht_seconds) / max(agents - load, 0.01)


# -----------------------------
# Equilibrium
# -----------------------------
def solve_equilibrium_abandonment(
    base_traffic: float,
    agents: int,
    aht_seconds: float,
    average_patience_seconds: float,
    max_iterations: Optional[int] = None,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> float:
    """
    Fixed point of (abandonment rate, virtual traffic).

    Each round:
      1. abandonment at the current virtual traffic
      2. retrial probability from the resulting average wait
      3. virtual traffic from the new abandonment and retrial figures
    until both move by less than the tolerance. Near the stability edge the
    estimates cycle instead of settling; if the iteration budget runs out, the
    mean of the trailing half of the estimates is returned.
    """
    if base_traffic <= 0 or aht_seconds <= 0:
        return 0.0
    if agents <= 0:
        return 1.0

    iterations = settings.max_iterations if max_iterations is None else int(max_iterations)
    tol = settings.convergence_tolerance

    abandonment = settings.initial_abandonment
    load = float(base_traffic)
    history: list[float] = []

    for i in range(iterations):
        new_abandonment = _abandonment_at_load(agents, load, aht_seconds, average_patience_seconds, settings)

        wait = _wait_at_load(agents, load, aht_seconds)
        retry = retrial_probability(wait, average_patience_seconds, settings=settings)
        new_load = virtual_traffic(base_traffic, new_abandonment, retry, settings=settings)

        if abs(new_abandonment - abandonment) < tol and abs(new_load - load) < tol:
            logger.debug("equilibrium reached after %d iterations (agents=%d)", i + 1, agents)
            return new_abandonment

        abandonment = new_abandonment
        load = new_load
        history.append(abandonment)

    if not history:
        return abandonment

    tail = history[len(history) // 2 :]
    settled = sum(tail) / len(tail)
    logger.warning(
        "equilibrium not reached in %d iterations (base_traffic=%.4f agents=%d); using mean of last %d estimates %.4f",
        iterations,
        base_traffic,
        agents,
        len(tail),
        settled,
    )
    return settled


def _equilibrium_state(
    agents: int,
    base_traffic: float,
    aht_seconds: float,
    average_patience_seconds: float,
    settings: EngineSettings,
) -> tuple[float, float, float]:
    """Returns (abandonment_rate, retrial_probability, virtual_traffic)."""
    abandonment = solve_equilibrium_abandonment(
        base_traffic, agents, aht_seconds, average_patience_seconds, settings=settings
    )
    wait = average_wait(agents, base_traffic, aht_seconds)
    retry = retrial_probability(wait, average_patience_seconds, settings=settings)
    load = virtual_traffic(base_traffic, abandonment, retry, settings=settings)
    return abandonment, retry, load


def _service_level_at_load(agents: int, load: float, aht_seconds: float, threshold_seconds: float) -> float:
    if load >= agents:
        return 0.0

    T = max(float(threshold_seconds), 0.0)
    pw = wait_probability(agents, load)
    sl = 1.0 - pw * math.exp(-(agents - load) * (T / float(aht_seconds)))
    return max(0.0, min(1.0, float(sl)))


def service_level_x(
    agents: int,
    base_traffic: float,
    aht_seconds: float,
    threshold_seconds: float,
    average_patience_seconds: float,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> float:
    """
    Erlang C service level evaluated against the equilibrium virtual traffic:

    SL(T) = 1 - Pw(n, A_virtual) * exp(-(n - A_virtual) * (T / AHT))
    """
    if base_traffic <= 0 or aht_seconds <= 0:
        return 1.0
    if agents <= base_traffic:
        return 0.0

    _, _, load = _equilibrium_state(agents, base_traffic, aht_seconds, average_patience_seconds, settings)
    return _service_level_at_load(agents, load, aht_seconds, threshold_seconds)


# -----------------------------
# Staffing
# -----------------------------
def solve_agents(
    base_traffic: float,
    aht_seconds: float,
    target_service_level: float,
    threshold_seconds: float,
    max_occupancy: float,
    average_patience_seconds: float,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> Optional[int]:
    """Minimum agents meeting target SL under Erlang X; 0 for no load, None if unachievable."""
    if base_traffic <= 0 or aht_seconds <= 0:
        return 0
    return _search_agents(
        lambda n: service_level_x(
            n, base_traffic, aht_seconds, threshold_seconds, average_patience_seconds, settings=settings
        ),
        base_traffic,
        target_service_level,
        max_occupancy,
        settings=settings,
    )


@dataclass(frozen=True)
class ErlangXMetrics:
    traffic_intensity: float
    required_agents: int
    service_level: float
    asa_seconds: float
    occupancy: float
    abandonment_rate: float
    expected_abandonments: float
    answered_contacts: float
    retrial_probability: float
    virtual_traffic: float


def erlang_x_metrics(
    volume: float,
    base_traffic: float,
    aht_seconds: float,
    target_service_level: float,
    threshold_seconds: float,
    max_occupancy: float,
    average_patience_seconds: float,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> Optional[ErlangXMetrics]:
    # agents -> (service_level, abandonment, retrial, virtual traffic)
    evaluated: dict[int, tuple[float, float, float, float]] = {}

    def service_level_at(agents: int) -> float:
        abandonment, retry, load = _equilibrium_state(
            agents, base_traffic, aht_seconds, average_patience_seconds, settings
        )
        sl = _service_level_at_load(agents, load, aht_seconds, threshold_seconds)
        evaluated[agents] = (sl, abandonment, retry, load)
        return sl

    n: Optional[int]
    if base_traffic <= 0 or aht_seconds <= 0:
        n = 0
        abandonment, retry, load = _equilibrium_state(0, base_traffic, aht_seconds, average_patience_seconds, settings)
        evaluated[0] = (1.0, abandonment, retry, load)
    else:
        n = _search_agents(service_level_at, base_traffic, target_service_level, max_occupancy, settings=settings)
    if n is None:
        return None

    service_level, abandonment, retry, load = evaluated[n]
    v = max(float(volume), 0.0)
    abandoned = v * abandonment

    return ErlangXMetrics(
        traffic_intensity=float(base_traffic),
        required_agents=n,
        service_level=service_level,
        asa_seconds=average_wait(n, base_traffic, aht_seconds),
        occupancy=occupancy(base_traffic, n),
        abandonment_rate=abandonment,
        expected_abandonments=abandoned,
        answered_contacts=v - abandoned,
        retrial_probability=retry,
        virtual_traffic=load,
    )


__all__ = [
    "retrial_probability",
    "virtual_traffic",
    "abandonment_rate_x",
    "solve_equilibrium_abandonment",
    "service_level_x",
    "solve_agents",
    "ErlangXMetrics",
    "erlang_x_metrics",
]
