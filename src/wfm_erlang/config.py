# src/wfm_erlang/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class EngineSettings:
    """
    Empirical constants used by the Erlang-X engine and the agent search.

    None of these has an analytical derivation; they are tunable.
    """
    # Weibull shape for patience (1 = exponential, >1 = patience wears thin)
    patience_shape: float = 1.2

    # Retrial behaviour of abandoned contacts
    base_retrial_rate: float = 0.40
    max_retrial_rate: float = 0.70
    retrial_slope: float = 0.15
    max_frustration: float = 2.0
    feedback_instability: float = 0.99

    # Fixed-point iteration
    initial_abandonment: float = 0.05
    max_iterations: int = 50
    convergence_tolerance: float = 0.001

    # Agent search ceiling: ceil(traffic * factor), at least min_search_horizon below 1 Erlang
    search_horizon_factor: float = 3.0
    min_search_horizon: int = 10

    def __post_init__(self) -> None:
        if self.patience_shape <= 0:
            raise ValueError("patience_shape must be > 0")
        if not (0.0 <= self.base_retrial_rate <= self.max_retrial_rate <= 1.0):
            raise ValueError("retrial rates must satisfy 0 <= base_retrial_rate <= max_retrial_rate <= 1")
        if self.retrial_slope < 0 or self.max_frustration < 0:
            raise ValueError("retrial_slope and max_frustration must be >= 0")
        if not (0.0 < self.feedback_instability <= 1.0):
            raise ValueError("feedback_instability must be in (0, 1]")
        if not (0.0 <= self.initial_abandonment <= 1.0):
            raise ValueError("initial_abandonment must be in [0, 1]")
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be >= 1")
        if self.convergence_tolerance <= 0:
            raise ValueError("convergence_tolerance must be > 0")
        if self.search_horizon_factor < 1.0:
            raise ValueError("search_horizon_factor must be >= 1")
        if self.min_search_horizon < 1:
            raise ValueError("min_search_horizon must be >= 1")


DEFAULT_SETTINGS = EngineSettings()

ENV_PREFIX = "WFM_ERLANG_"


def _parse(name: str, raw: str, default: Any) -> Any:
    try:
        if isinstance(default, int):
            return int(raw)
        return float(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from None


def load_settings_from_env(
    *,
    prefix: str = ENV_PREFIX,
    environ: Optional[Mapping[str, str]] = None,
    base: EngineSettings = DEFAULT_SETTINGS,
) -> EngineSettings:
    """
    Build settings from environment variables, e.g.
      WFM_ERLANG_MAX_ITERATIONS=100
      WFM_ERLANG_CONVERGENCE_TOLERANCE=0.0001

    Unset or blank variables keep the value from `base`.
    """
    env = os.environ if environ is None else environ

    overrides: Dict[str, Any] = {}
    for f in fields(EngineSettings):
        name = f"{prefix}{f.name.upper()}"
        raw = env.get(name, "").strip()
        if not raw:
            continue
        overrides[f.name] = _parse(name, raw, getattr(base, f.name))

    if not overrides:
        return base
    return replace(base, **overrides)


__all__ = [
    "EngineSettings",
    "DEFAULT_SETTINGS",
    "ENV_PREFIX",
    "load_settings_from_env",
]
