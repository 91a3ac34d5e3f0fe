"""
Tests for engine configuration.
"""

import pytest

from algostep.config import DEFAULT_MAX_EVENTS, DEFAULT_MAX_EXECUTION_MS, EngineConfig


def test_defaults():
    config = EngineConfig()
    assert config.max_execution_ms == DEFAULT_MAX_EXECUTION_MS == 5000
    assert config.max_events == DEFAULT_MAX_EVENTS == 10000
    assert config.preempt_sync_loops is True
    assert config.animation_interval_ms == 80
    assert config.default_speed == "normal"


def test_from_env():
    config = EngineConfig.from_env({
        "ALGOSTEP_MAX_EXECUTION_MS": "250",
        "ALGOSTEP_MAX_EVENTS": "42",
        "ALGOSTEP_PREEMPT": "false",
        "ALGOSTEP_ANIMATION_MS": "20",
        "ALGOSTEP_SPEED": "Fast",
    })

    assert config.max_execution_ms == 250
    assert config.max_events == 42
    assert config.preempt_sync_loops is False
    assert config.animation_interval_ms == 20
    assert config.default_speed == "fast"


def test_from_env_empty_uses_defaults():
    assert EngineConfig.from_env({}) == EngineConfig()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_execution_ms": 0},
        {"max_events": -1},
        {"animation_interval_ms": 0},
        {"default_speed": "warp"},
    ],
)
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ValueError):
        EngineConfig(**kwargs)
