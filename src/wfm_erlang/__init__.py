# src/wfm_erlang/__init__.py
from __future__ import annotations

# -----------------------------
# Configuration
# -----------------------------
from .config import (
    EngineSettings,
    DEFAULT_SETTINGS,
    load_settings_from_env,
)

# -----------------------------
# Queueing models
# -----------------------------
from .traffic import traffic_intensity

from .erlangc import (
    wait_probability,
    service_level,
    average_wait,
    occupancy,
    fte,
)

from .erlanga import (
    abandonment_probability,
    service_level_with_abandonment,
    expected_abandonments,
    average_wait_with_abandonment,
)

from .erlangx import (
    retrial_probability,
    virtual_traffic,
    abandonment_rate_x,
    solve_equilibrium_abandonment,
    service_level_x,
)

# -----------------------------
# Staffing / dispatch
# -----------------------------
from .staffing import (
    ModelId,
    MODEL_IDS,
    WorkloadParameters,
    ServiceTarget,
    PatienceParameters,
    StaffingResult,
    run_model,
    result_to_dict,
    scheduled_headcount,
)

# -----------------------------
# Interval tables / Monte Carlo
# -----------------------------
from .batch import run_interval_table, compare_models
from .validation import validate_interval_df, validate_intervals
from .monte_carlo import (
    MonteCarloConfig,
    run_interval_monte_carlo,
    VolumeDist,
    AHTDist,
)

__all__ = [
    # Configuration
    "EngineSettings",
    "DEFAULT_SETTINGS",
    "load_settings_from_env",
    # Traffic
    "traffic_intensity",
    # Erlang C
    "wait_probability",
    "service_level",
    "average_wait",
    "occupancy",
    "fte",
    # Erlang A
    "abandonment_probability",
    "service_level_with_abandonment",
    "expected_abandonments",
    "average_wait_with_abandonment",
    # Erlang X
    "retrial_probability",
    "virtual_traffic",
    "abandonment_rate_x",
    "solve_equilibrium_abandonment",
    "service_level_x",
    # Staffing
    "ModelId",
    "MODEL_IDS",
    "WorkloadParameters",
    "ServiceTarget",
    "PatienceParameters",
    "StaffingResult",
    "run_model",
    "result_to_dict",
    "scheduled_headcount",
    # Batch
    "run_interval_table",
    "compare_models",
    "validate_interval_df",
    "validate_intervals",
    # Monte Carlo
    "MonteCarloConfig",
    "run_interval_monte_carlo",
    "VolumeDist",
    "AHTDist",
]
