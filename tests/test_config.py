import pytest

from wfm_erlang.config import DEFAULT_SETTINGS, EngineSettings, load_settings_from_env


def test_defaults():
    s = EngineSettings()
    assert s.max_iterations == 50
    assert s.convergence_tolerance == 0.001
    assert s.base_retrial_rate == 0.40
    assert s.max_retrial_rate == 0.70
    assert s.patience_shape == 1.2


def test_invalid_settings_rejected():
    with pytest.raises(ValueError):
        EngineSettings(base_retrial_rate=0.8, max_retrial_rate=0.7)
    with pytest.raises(ValueError):
        EngineSettings(max_iterations=0)
    with pytest.raises(ValueError):
        EngineSettings(convergence_tolerance=0.0)


def test_env_overrides():
    env = {
        "WFM_ERLANG_MAX_ITERATIONS": "100",
        "WFM_ERLANG_CONVERGENCE_TOLERANCE": "0.0001",
        "WFM_ERLANG_PATIENCE_SHAPE": " ",
    }
    s = load_settings_from_env(environ=env)
    assert s.max_iterations == 100
    assert isinstance(s.max_iterations, int)
    assert s.convergence_tolerance == 0.0001
    assert s.patience_shape == DEFAULT_SETTINGS.patience_shape


def test_env_without_overrides_returns_base():
    assert load_settings_from_env(environ={}) is DEFAULT_SETTINGS


def test_env_bad_value():
    with pytest.raises(ValueError, match="WFM_ERLANG_MAX_ITERATIONS"):
        load_settings_from_env(environ={"WFM_ERLANG_MAX_ITERATIONS": "lots"})
