from __future__ import annotations

import pandas as pd


REQUIRED_INTERVAL_COLUMNS = {"interval_start", "interval_minutes", "volume", "aht_seconds", "is_open"}


def validate_interval_df(df: pd.DataFrame) -> None:
    missing = REQUIRED_INTERVAL_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(
            f"Interval dataframe missing required columns: {sorted(missing)}. "
            f"Expected: {sorted(REQUIRED_INTERVAL_COLUMNS)}"
        )

    if df.empty:
        raise ValueError("Interval dataframe is empty")

    for col in ("interval_minutes", "volume", "aht_seconds"):
        if pd.to_numeric(df[col], errors="coerce").isna().any():
            raise ValueError(f"{col} must be numeric")

    # ensure interval_start is parseable
    parsed = pd.to_datetime(df["interval_start"], errors="coerce")
    if parsed.isna().any():
        bad = df.index[parsed.isna()].tolist()[:10]
        raise ValueError(f"interval_start has invalid timestamps. Example bad rows: {bad}")


def validate_intervals(df: pd.DataFrame) -> pd.DataFrame:
    """
    Flag degenerate rows instead of rejecting them. The engine treats these as
    "no load", so a caller may still run them; the flags say where that happened.
    """
    validate_interval_df(df)

    out = df.copy()
    volume = pd.to_numeric(out["volume"], errors="coerce")
    aht = pd.to_numeric(out["aht_seconds"], errors="coerce")
    minutes = pd.to_numeric(out["interval_minutes"], errors="coerce")
    is_open = out["is_open"].astype(bool)

    out["flag_volume_negative"] = volume < 0
    out["flag_aht_nonpositive"] = aht <= 0
    out["flag_interval_nonpositive"] = minutes <= 0
    out["flag_open_with_zero_volume"] = is_open & (volume == 0)

    flags = [
        "flag_volume_negative",
        "flag_aht_nonpositive",
        "flag_interval_nonpositive",
        "flag_open_with_zero_volume",
    ]
    out["has_issue"] = out[flags].any(axis=1)
    return out


__all__ = [
    "REQUIRED_INTERVAL_COLUMNS",
    "validate_interval_df",
    "validate_intervals",
]
