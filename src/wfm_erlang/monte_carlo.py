# src/wfm_erlang/monte_carlo.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, TypeAlias

import numpy as np
import pandas as pd

from .config import DEFAULT_SETTINGS, EngineSettings
from .staffing import ModelId, PatienceParameters, ServiceTarget, WorkloadParameters, run_model
from .validation import validate_interval_df


# -----------------------------
# Public types
# -----------------------------
VolumeDist: TypeAlias = Literal["poisson", "normal", "lognormal"]
AHTDist: TypeAlias = Literal["normal", "lognormal"]


# -----------------------------
# Config
# -----------------------------
@dataclass(frozen=True)
class MonteCarloConfig:
    n_sims: int = 1000
    seed: int = 42
    volume_dist: VolumeDist = "poisson"
    volume_cv: float = 0.15
    aht_dist: AHTDist = "lognormal"
    aht_cv: float = 0.10


# -----------------------------
# Random draws
# -----------------------------
def _draw_volume(
    base_volume: float,
    dist: VolumeDist,
    n: int,
    rng: np.random.Generator,
    cv: float,
) -> np.ndarray:
    v = max(float(base_volume), 0.0)

    if dist == "poisson":
        draws = rng.poisson(lam=v, size=n).astype(float)
    elif dist == "normal":
        sigma = max(float(cv), 1e-9) * max(v, 1e-9)
        draws = rng.normal(loc=v, scale=sigma, size=n)
    elif dist == "lognormal":
        cv2 = max(float(cv), 1e-9)
        mu = np.log(max(v, 1e-9)) - 0.5 * np.log(1.0 + cv2**2)
        sigma = np.sqrt(np.log(1.0 + cv2**2))
        draws = rng.lognormal(mean=mu, sigma=sigma, size=n)
    else:
        raise ValueError(f"Unsupported volume distribution: {dist}")

    return np.clip(draws, 0.0, None)


def _draw_aht(
    base_aht_seconds: float,
    dist: AHTDist,
    n: int,
    rng: np.random.Generator,
    cv: float,
) -> np.ndarray:
    a = max(float(base_aht_seconds), 1.0)

    if dist == "lognormal":
        cv2 = max(float(cv), 1e-9)
        mu = np.log(a) - 0.5 * np.log(1.0 + cv2**2)
        sigma = np.sqrt(np.log(1.0 + cv2**2))
        draws = rng.lognormal(mean=mu, sigma=sigma, size=n)
    elif dist == "normal":
        sigma = max(float(cv), 1e-9) * a
        draws = rng.normal(loc=a, scale=sigma, size=n)
    else:
        raise ValueError(f"Unsupported AHT distribution: {dist}")

    return np.clip(draws, 1.0, None)


def _percentiles(prefix: str, values: np.ndarray) -> Dict[str, float]:
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        return {f"{prefix}_{k}": np.nan for k in ("mean", "p50", "p90", "p95")}
    return {
        f"{prefix}_mean": float(np.mean(finite)),
        f"{prefix}_p50": float(np.quantile(finite, 0.50)),
        f"{prefix}_p90": float(np.quantile(finite, 0.90)),
        f"{prefix}_p95": float(np.quantile(finite, 0.95)),
    }


# -----------------------------
# Core simulation for one interval
# -----------------------------
def _simulate_interval(
    *,
    base_volume: float,
    base_aht_seconds: float,
    interval_minutes: float,
    is_open: bool,
    cfg: MonteCarloConfig,
    simulate_volume: bool,
    simulate_aht: bool,
    target: ServiceTarget,
    patience: Optional[PatienceParameters],
    model_id: ModelId,
    shrinkage: float,
    settings: EngineSettings,
) -> Dict[str, Any]:
    if not is_open or float(base_volume) <= 0.0:
        out: Dict[str, Any] = {}
        out.update(_percentiles("agents", np.zeros(1)))
        out.update(_percentiles("fte", np.zeros(1)))
        out.update({"asa_mean": 0.0, "occ_mean": 0.0, "sla_breach_rate": 0.0, "unachievable_rate": 0.0})
        return out

    n_sims = int(cfg.n_sims)
    if n_sims <= 0:
        raise ValueError("cfg.n_sims must be > 0")

    # Deterministic per interval but not identical everywhere
    mix = hash((cfg.seed, float(base_volume), float(base_aht_seconds), float(interval_minutes))) & 0xFFFFFFFF
    rng = np.random.default_rng(int(mix))

    vol_draws = (
        _draw_volume(base_volume, cfg.volume_dist, n_sims, rng, cfg.volume_cv)
        if simulate_volume
        else np.full(n_sims, float(base_volume))
    )
    aht_draws = (
        _draw_aht(base_aht_seconds, cfg.aht_dist, n_sims, rng, cfg.aht_cv)
        if simulate_aht
        else np.full(n_sims, float(base_aht_seconds))
    )

    agents = np.full(n_sims, np.nan)
    fte_vals = np.full(n_sims, np.nan)
    asa_vals = np.full(n_sims, np.nan)
    occ_vals = np.full(n_sims, np.nan)
    breach = np.zeros(n_sims, dtype=float)
    unachievable = np.zeros(n_sims, dtype=float)

    for i in range(n_sims):
        workload = WorkloadParameters(
            volume=float(vol_draws[i]),
            aht_seconds=float(aht_draws[i]),
            interval_seconds=float(interval_minutes) * 60.0,
            shrinkage=float(shrinkage),
        )
        res = run_model(workload, target, patience, model_id, settings=settings)

        if res is None:
            unachievable[i] = 1.0
            breach[i] = 1.0
            continue

        agents[i] = float(res.required_agents)
        fte_vals[i] = float(res.total_fte)
        asa_vals[i] = float(res.asa_seconds)
        occ_vals[i] = float(res.occupancy)
        breach[i] = 1.0 if float(res.service_level) < float(target.target_service_level) else 0.0

    finite_asa = asa_vals[np.isfinite(asa_vals)]
    finite_occ = occ_vals[np.isfinite(occ_vals)]

    out = {}
    out.update(_percentiles("agents", agents))
    out.update(_percentiles("fte", fte_vals))
    out.update(
        {
            "asa_mean": float(np.mean(finite_asa)) if finite_asa.size else np.nan,
            "occ_mean": float(np.mean(finite_occ)) if finite_occ.size else np.nan,
            "sla_breach_rate": float(np.mean(breach)),
            "unachievable_rate": float(np.mean(unachievable)),
        }
    )
    return out


# -----------------------------
# Public API
# -----------------------------
def run_interval_monte_carlo(
    *,
    interval_df: pd.DataFrame,
    cfg: MonteCarloConfig,
    target: ServiceTarget,
    patience: Optional[PatienceParameters] = None,
    model_id: ModelId = "erlang_c",
    simulate_volume: bool = True,
    simulate_aht: bool = False,
    shrinkage: float = 0.0,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> pd.DataFrame:
    validate_interval_df(interval_df)

    df = interval_df.copy()
    df["interval_start"] = pd.to_datetime(df["interval_start"], errors="coerce")
    df["interval_minutes"] = pd.to_numeric(df["interval_minutes"], errors="coerce").astype(float)
    df["volume"] = pd.to_numeric(df["volume"], errors="coerce").astype(float)
    df["aht_seconds"] = pd.to_numeric(df["aht_seconds"], errors="coerce").astype(float)
    df["is_open"] = df["is_open"].astype(bool)

    rows: list[Dict[str, Any]] = []
    for _, r in df.iterrows():
        rows.append(
            _simulate_interval(
                base_volume=float(r["volume"]),
                base_aht_seconds=float(r["aht_seconds"]),
                interval_minutes=float(r["interval_minutes"]),
                is_open=bool(r["is_open"]),
                cfg=cfg,
                simulate_volume=bool(simulate_volume),
                simulate_aht=bool(simulate_aht),
                target=target,
                patience=patience,
                model_id=model_id,
                shrinkage=float(shrinkage),
                settings=settings,
            )
        )

    return pd.concat([df.reset_index(drop=True), pd.DataFrame(rows)], axis=1)


__all__ = [
    "VolumeDist",
    "AHTDist",
    "MonteCarloConfig",
    "run_interval_monte_carlo",
]
