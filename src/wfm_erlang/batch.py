# src/wfm_erlang/batch.py
from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from .config import DEFAULT_SETTINGS, EngineSettings
from .staffing import (
    MODEL_IDS,
    MODEL_NAMES,
    ModelId,
    PatienceParameters,
    ServiceTarget,
    StaffingResult,
    WorkloadParameters,
    result_to_dict,
    run_model,
    scheduled_headcount,
)
from .validation import validate_interval_df

_RESULT_COLUMNS = [
    "model",
    "erlangs",
    "required_agents",
    "total_fte",
    "scheduled",
    "service_level",
    "asa_seconds",
    "occupancy",
    "abandonment_rate",
    "expected_abandonments",
    "answered_contacts",
    "retrial_probability",
    "virtual_traffic",
    "achievable",
]


def _row(model_id: ModelId, workload: WorkloadParameters, result: Optional[StaffingResult]) -> Dict[str, Any]:
    if result is None:
        # Unachievable: keep the load, leave the metrics empty
        row: Dict[str, Any] = {c: np.nan for c in _RESULT_COLUMNS}
        row["model"] = MODEL_NAMES[model_id]
        row["erlangs"] = workload.traffic_intensity
        row["achievable"] = False
        return row

    row = result_to_dict(result)
    scheduled = scheduled_headcount(result)
    row["scheduled"] = scheduled if scheduled is not None else np.nan
    row["achievable"] = True
    return {c: (np.nan if row[c] is None else row[c]) for c in _RESULT_COLUMNS}


def _closed_row(model_id: ModelId) -> Dict[str, Any]:
    row: Dict[str, Any] = {c: np.nan for c in _RESULT_COLUMNS}
    row.update(
        {
            "model": MODEL_NAMES[model_id],
            "erlangs": 0.0,
            "required_agents": 0,
            "total_fte": 0.0,
            "scheduled": 0,
            "service_level": 1.0,
            "asa_seconds": 0.0,
            "occupancy": 0.0,
            "achievable": True,
        }
    )
    return row


def run_interval_table(
    *,
    interval_df: pd.DataFrame,
    target: ServiceTarget,
    patience: Optional[PatienceParameters] = None,
    model_id: ModelId = "erlang_c",
    shrinkage: float = 0.0,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> pd.DataFrame:
    """
    Staff every interval of an interval table with one model.

    Expected columns: interval_start, interval_minutes, volume, aht_seconds, is_open.
    Closed intervals get zero staffing; intervals where the target is
    unachievable get achievable=False and empty metrics.
    """
    validate_interval_df(interval_df)

    df = interval_df.copy()
    df["interval_start"] = pd.to_datetime(df["interval_start"], errors="coerce")
    df["interval_minutes"] = pd.to_numeric(df["interval_minutes"], errors="coerce").astype(float)
    df["volume"] = pd.to_numeric(df["volume"], errors="coerce").astype(float)
    df["aht_seconds"] = pd.to_numeric(df["aht_seconds"], errors="coerce").astype(float)
    df["is_open"] = df["is_open"].astype(bool)

    rows: list[Dict[str, Any]] = []
    for _, r in df.iterrows():
        if not bool(r["is_open"]):
            rows.append(_closed_row(model_id))
            continue

        workload = WorkloadParameters(
            volume=float(r["volume"]),
            aht_seconds=float(r["aht_seconds"]),
            interval_seconds=float(r["interval_minutes"]) * 60.0,
            shrinkage=float(shrinkage),
        )
        result = run_model(workload, target, patience, model_id, settings=settings)
        rows.append(_row(model_id, workload, result))

    return pd.concat([df.reset_index(drop=True), pd.DataFrame(rows, columns=_RESULT_COLUMNS)], axis=1)


def compare_models(
    workload: WorkloadParameters,
    target: ServiceTarget,
    patience: PatienceParameters,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> pd.DataFrame:
    """Run Erlang C, A and X on the same workload; one row per model."""
    rows = [
        _row(model_id, workload, run_model(workload, target, patience, model_id, settings=settings))
        for model_id in MODEL_IDS
    ]
    return pd.DataFrame(rows, columns=_RESULT_COLUMNS, index=pd.Index(list(MODEL_IDS), name="model_id"))


__all__ = [
    "run_interval_table",
    "compare_models",
]
