import pandas as pd
import pytest

from wfm_erlang.batch import compare_models, run_interval_table
from wfm_erlang.staffing import PatienceParameters, ServiceTarget, WorkloadParameters

TARGET = ServiceTarget(target_service_level=0.80, threshold_seconds=20, max_occupancy=0.90)


def _intervals():
    return pd.DataFrame(
        {
            "interval_start": ["2024-01-01 09:00:00", "2024-01-01 09:30:00", "2024-01-01 10:00:00"],
            "interval_minutes": [30, 30, 30],
            "volume": [100, 0, 200],
            "aht_seconds": [180, 180, 180],
            "is_open": [True, True, False],
        }
    )


def test_interval_table_erlang_c():
    out = run_interval_table(interval_df=_intervals(), target=TARGET, shrinkage=0.25)

    assert len(out) == 3
    assert out.loc[0, "erlangs"] == 10.0
    assert out.loc[0, "required_agents"] > 10
    assert out.loc[0, "scheduled"] >= out.loc[0, "required_agents"]
    assert bool(out.loc[0, "achievable"])

    # open, no volume
    assert out.loc[1, "required_agents"] == 0
    assert out.loc[1, "service_level"] == 1.0

    # closed
    assert out.loc[2, "required_agents"] == 0
    assert out.loc[2, "erlangs"] == 0.0


def test_interval_table_erlang_a_has_abandonment():
    out = run_interval_table(
        interval_df=_intervals(),
        target=TARGET,
        patience=PatienceParameters(120),
        model_id="erlang_a",
    )
    assert out.loc[0, "abandonment_rate"] >= 0.0
    assert out.loc[0, "model"] == "Erlang A"


def test_interval_table_marks_unachievable():
    impossible = ServiceTarget(target_service_level=1.0, threshold_seconds=0)
    out = run_interval_table(interval_df=_intervals().iloc[:1], target=impossible)
    assert not bool(out.loc[0, "achievable"])
    assert pd.isna(out.loc[0, "required_agents"])
    assert out.loc[0, "erlangs"] == 10.0


def test_interval_table_missing_columns():
    with pytest.raises(ValueError):
        run_interval_table(interval_df=_intervals().drop(columns=["is_open"]), target=TARGET)


def test_compare_models():
    out = compare_models(
        WorkloadParameters(volume=1000, aht_seconds=180, interval_seconds=1800),
        TARGET,
        PatienceParameters(120),
    )
    assert list(out.index) == ["erlang_c", "erlang_a", "erlang_x"]
    assert out["achievable"].all()
    # abandonment relieves the queue
    assert out.loc["erlang_a", "required_agents"] <= out.loc["erlang_c", "required_agents"]
    assert pd.isna(out.loc["erlang_c", "abandonment_rate"])
    assert not pd.isna(out.loc["erlang_x", "virtual_traffic"])


def test_interval_table_keeps_fractional_minutes():
    df = pd.DataFrame(
        {
            "interval_start": ["2024-01-01 09:00:00", "2024-01-01 09:00:30"],
            "interval_minutes": [0.5, 7.5],
            "volume": [10, 100],
            "aht_seconds": [180, 180],
            "is_open": [True, True],
        }
    )
    out = run_interval_table(interval_df=df, target=TARGET)

    assert out.loc[0, "erlangs"] == pytest.approx(60.0)
    assert out.loc[0, "required_agents"] > 60
    assert out.loc[1, "erlangs"] == pytest.approx(40.0)
    assert out.loc[1, "required_agents"] > 40
