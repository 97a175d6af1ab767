# src/wfm_erlang/staffing.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, TypeAlias, get_args

from .config import DEFAULT_SETTINGS, EngineSettings
from .erlanga import erlang_a_metrics, patience_ratio
from .erlangc import erlang_c_metrics, fte
from .erlangx import erlang_x_metrics
from .traffic import traffic_intensity

logger = logging.getLogger(__name__)

ModelId: TypeAlias = Literal["erlang_c", "erlang_a", "erlang_x"]

MODEL_IDS: tuple[ModelId, ...] = get_args(ModelId)

MODEL_NAMES: Dict[str, str] = {
    "erlang_c": "Erlang C",
    "erlang_a": "Erlang A",
    "erlang_x": "Erlang X",
}


# -----------------------------
# Data models
# -----------------------------
@dataclass(frozen=True)
class WorkloadParameters:
    volume: float
    aht_seconds: float
    interval_seconds: float

    # Fraction of paid time unavailable for handling contacts
    shrinkage: float = 0.0

    @property
    def traffic_intensity(self) -> float:
        return traffic_intensity(self.volume, self.aht_seconds, self.interval_seconds)


@dataclass(frozen=True)
class ServiceTarget:
    """
    Fractions, not percentages: 80/20 is
      ServiceTarget(target_service_level=0.80, threshold_seconds=20)
    """
    target_service_level: float
    threshold_seconds: float
    max_occupancy: float = 1.0

    def __post_init__(self) -> None:
        if not (0.0 <= float(self.target_service_level) <= 1.0):
            raise ValueError("target_service_level must be a fraction in [0, 1]")
        if float(self.threshold_seconds) < 0:
            raise ValueError("threshold_seconds must be >= 0")
        if not (0.0 < float(self.max_occupancy) <= 1.0):
            raise ValueError("max_occupancy must be a fraction in (0, 1]")

    @classmethod
    def from_percentages(
        cls,
        target_service_level_percent: float,
        threshold_seconds: float,
        max_occupancy_percent: float = 100.0,
    ) -> "ServiceTarget":
        return cls(
            target_service_level=float(target_service_level_percent) / 100.0,
            threshold_seconds=float(threshold_seconds),
            max_occupancy=float(max_occupancy_percent) / 100.0,
        )


@dataclass(frozen=True)
class PatienceParameters:
    average_patience_seconds: float

    def patience_ratio(self, aht_seconds: float) -> float:
        return patience_ratio(self.average_patience_seconds, aht_seconds)


@dataclass(frozen=True)
class StaffingResult:
    model_id: ModelId
    model_name: str
    traffic_intensity: float
    required_agents: int
    total_fte: float
    service_level: float
    asa_seconds: float
    occupancy: float

    # Erlang A / X only
    abandonment_rate: Optional[float] = None
    expected_abandonments: Optional[float] = None
    answered_contacts: Optional[float] = None

    # Erlang X only
    retrial_probability: Optional[float] = None
    virtual_traffic: Optional[float] = None


# -----------------------------
# Internal helpers
# -----------------------------
def _require_patience(model_id: ModelId, patience: Optional[PatienceParameters]) -> float:
    if patience is None:
        raise ValueError(f"{model_id} requires patience parameters")
    return float(patience.average_patience_seconds)


def _run_erlang_c(
    workload: WorkloadParameters,
    target: ServiceTarget,
    traffic: float,
    settings: EngineSettings,
) -> Optional[StaffingResult]:
    m = erlang_c_metrics(
        traffic,
        workload.aht_seconds,
        target.target_service_level,
        target.threshold_seconds,
        target.max_occupancy,
        settings=settings,
    )
    if m is None:
        return None

    return StaffingResult(
        model_id="erlang_c",
        model_name=MODEL_NAMES["erlang_c"],
        traffic_intensity=traffic,
        required_agents=m.required_agents,
        total_fte=fte(m.required_agents, workload.shrinkage),
        service_level=m.service_level,
        asa_seconds=m.asa_seconds,
        occupancy=m.occupancy,
    )


def _run_erlang_a(
    workload: WorkloadParameters,
    target: ServiceTarget,
    patience_seconds: float,
    traffic: float,
    settings: EngineSettings,
) -> Optional[StaffingResult]:
    m = erlang_a_metrics(
        workload.volume,
        traffic,
        workload.aht_seconds,
        target.target_service_level,
        target.threshold_seconds,
        target.max_occupancy,
        patience_seconds,
        settings=settings,
    )
    if m is None:
        return None

    return StaffingResult(
        model_id="erlang_a",
        model_name=MODEL_NAMES["erlang_a"],
        traffic_intensity=traffic,
        required_agents=m.required_agents,
        total_fte=fte(m.required_agents, workload.shrinkage),
        service_level=m.service_level,
        asa_seconds=m.asa_seconds,
        occupancy=m.occupancy,
        abandonment_rate=m.abandonment_probability,
        expected_abandonments=m.expected_abandonments,
        answered_contacts=m.answered_contacts,
    )


def _run_erlang_x(
    workload: WorkloadParameters,
    target: ServiceTarget,
    patience_seconds: float,
    traffic: float,
    settings: EngineSettings,
) -> Optional[StaffingResult]:
    m = erlang_x_metrics(
        workload.volume,
        traffic,
        workload.aht_seconds,
        target.target_service_level,
        target.threshold_seconds,
        target.max_occupancy,
        patience_seconds,
        settings=settings,
    )
    if m is None:
        return None

    return StaffingResult(
        model_id="erlang_x",
        model_name=MODEL_NAMES["erlang_x"],
        traffic_intensity=traffic,
        required_agents=m.required_agents,
        total_fte=fte(m.required_agents, workload.shrinkage),
        service_level=m.service_level,
        asa_seconds=m.asa_seconds,
        occupancy=m.occupancy,
        abandonment_rate=m.abandonment_rate,
        expected_abandonments=m.expected_abandonments,
        answered_contacts=m.answered_contacts,
        retrial_probability=m.retrial_probability,
        virtual_traffic=m.virtual_traffic,
    )


# -----------------------------
# Public API
# -----------------------------
def run_model(
    workload: WorkloadParameters,
    target: ServiceTarget,
    patience: Optional[PatienceParameters] = None,
    model_id: ModelId = "erlang_c",
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> Optional[StaffingResult]:
    """
    Run Erlang C, A or X behind one interface.

    Returns None when the target cannot be met within the search horizon.
    No load is not an error: it returns required_agents == 0 and SL == 1.0.
    """
    traffic = workload.traffic_intensity
    logger.debug("running %s for traffic=%.4f", model_id, traffic)

    if model_id == "erlang_c":
        return _run_erlang_c(workload, target, traffic, settings)
    if model_id == "erlang_a":
        return _run_erlang_a(workload, target, _require_patience(model_id, patience), traffic, settings)
    if model_id == "erlang_x":
        return _run_erlang_x(workload, target, _require_patience(model_id, patience), traffic, settings)
    raise ValueError(f"Unsupported model_id: {model_id}")


_PERCENT_FIELDS = ("service_level", "occupancy", "abandonment_rate", "retrial_probability")


def result_to_dict(result: StaffingResult, as_percent: bool = False) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "model": result.model_name,
        "erlangs": result.traffic_intensity,
        "required_agents": result.required_agents,
        "total_fte": result.total_fte,
        "service_level": result.service_level,
        "asa_seconds": result.asa_seconds,
        "occupancy": result.occupancy,
        "abandonment_rate": result.abandonment_rate,
        "expected_abandonments": result.expected_abandonments,
        "answered_contacts": result.answered_contacts,
        "retrial_probability": result.retrial_probability,
        "virtual_traffic": result.virtual_traffic,
    }
    if as_percent:
        for key in _PERCENT_FIELDS:
            if out[key] is not None:
                out[key] = out[key] * 100.0
    return out


def scheduled_headcount(result: StaffingResult) -> Optional[int]:
    """Whole scheduled agents (FTE rounded up); None when shrinkage makes staffing impossible."""
    if math.isinf(result.total_fte):
        return None
    # round first so 14 / 0.7 does not become 21
    return int(math.ceil(round(result.total_fte, 9)))


__all__ = [
    "ModelId",
    "MODEL_IDS",
    "MODEL_NAMES",
    "WorkloadParameters",
    "ServiceTarget",
    "PatienceParameters",
    "StaffingResult",
    "run_model",
    "result_to_dict",
    "scheduled_headcount",
]
