import math

import pytest

from wfm_erlang.staffing import (
    PatienceParameters,
    ServiceTarget,
    WorkloadParameters,
    result_to_dict,
    run_model,
    scheduled_headcount,
)

TARGET = ServiceTarget(target_service_level=0.80, threshold_seconds=20, max_occupancy=0.90)
PATIENCE = PatienceParameters(average_patience_seconds=120)


def workload(volume=1000, aht=180, interval=1800, shrinkage=0.25):
    return WorkloadParameters(volume=volume, aht_seconds=aht, interval_seconds=interval, shrinkage=shrinkage)


def test_traffic_intensity_property():
    assert workload(volume=100).traffic_intensity == 10.0
    assert workload(volume=-5).traffic_intensity == 0.0


def test_service_target_from_percentages():
    t = ServiceTarget.from_percentages(80, 20, 90)
    assert t.target_service_level == pytest.approx(0.80)
    assert t.max_occupancy == pytest.approx(0.90)


def test_service_target_rejects_percentages_as_fractions():
    with pytest.raises(ValueError):
        ServiceTarget(target_service_level=80, threshold_seconds=20)
    with pytest.raises(ValueError):
        ServiceTarget(target_service_level=0.8, threshold_seconds=20, max_occupancy=0.0)


def test_patience_ratio():
    assert PatienceParameters(120).patience_ratio(240) == 0.5


def test_erlang_c_result_has_no_extras():
    res = run_model(workload(), TARGET, model_id="erlang_c")
    assert res is not None
    assert res.model_name == "Erlang C"
    assert res.service_level >= 0.80
    assert res.occupancy <= 0.90
    assert res.total_fte > res.required_agents
    assert res.abandonment_rate is None
    assert res.retrial_probability is None


def test_erlang_a_result_has_abandonment_extras():
    res = run_model(workload(), TARGET, PATIENCE, "erlang_a")
    assert res is not None
    assert res.abandonment_rate is not None
    assert res.expected_abandonments + res.answered_contacts == pytest.approx(1000)
    assert res.retrial_probability is None
    assert res.virtual_traffic is None


def test_erlang_x_result_has_retrial_extras():
    res = run_model(workload(), TARGET, PATIENCE, "erlang_x")
    assert res is not None
    assert res.retrial_probability is not None
    assert res.virtual_traffic >= res.traffic_intensity
    assert res.expected_abandonments + res.answered_contacts == pytest.approx(1000)


@pytest.mark.parametrize("model_id", ["erlang_c", "erlang_a", "erlang_x"])
def test_no_volume_returns_zero_agents(model_id):
    res = run_model(workload(volume=0), TARGET, PATIENCE, model_id)
    assert res is not None
    assert res.required_agents == 0
    assert res.service_level == 1.0
    assert res.asa_seconds == 0.0
    assert res.total_fte == 0.0


@pytest.mark.parametrize("model_id", ["erlang_c", "erlang_a", "erlang_x"])
def test_unachievable_target_returns_none(model_id):
    # 100% answered with zero wait never happens within the search horizon
    impossible = ServiceTarget(target_service_level=1.0, threshold_seconds=0, max_occupancy=0.95)
    assert run_model(workload(volume=100), impossible, PATIENCE, model_id) is None


def test_full_shrinkage_gives_infinite_fte():
    res = run_model(workload(shrinkage=1.0), TARGET)
    assert res is not None
    assert math.isinf(res.total_fte)
    assert scheduled_headcount(res) is None


def test_scheduled_headcount_rounds_up():
    res = run_model(workload(shrinkage=0.30), TARGET)
    assert res is not None
    assert scheduled_headcount(res) == math.ceil(round(res.required_agents / 0.7, 9))


def test_patience_required_for_abandonment_models():
    with pytest.raises(ValueError):
        run_model(workload(), TARGET, None, "erlang_a")


def test_unknown_model_rejected():
    with pytest.raises(ValueError):
        run_model(workload(), TARGET, PATIENCE, "erlang_b")  # type: ignore[arg-type]


def test_result_to_dict_percent():
    res = run_model(workload(), TARGET, PATIENCE, "erlang_a")
    d = result_to_dict(res)
    p = result_to_dict(res, as_percent=True)
    assert p["service_level"] == pytest.approx(d["service_level"] * 100)
    assert p["occupancy"] == pytest.approx(d["occupancy"] * 100)
    assert p["required_agents"] == d["required_agents"]
    assert p["virtual_traffic"] is None


def test_zero_target_staffs_a_stable_queue():
    res = run_model(workload(volume=100, shrinkage=0.0), ServiceTarget(target_service_level=0.0, threshold_seconds=20))
    assert res is not None
    assert res.required_agents == 11
    assert math.isfinite(res.asa_seconds)
