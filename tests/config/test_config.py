"""Test the configuration module functionality."""

import pytest

from trustflow.config import DEFAULT_FLOW_CONFIG, FlowConfig


def test_flow_config_defaults():
    config = FlowConfig()

    assert config.dust_threshold == 1
    assert config.min_edge_capacity == 1
    assert config.max_attempts_per_scale == 1000
    assert config.max_hops is None


def test_global_config_instance():
    assert DEFAULT_FLOW_CONFIG == FlowConfig()


def test_search_floor_is_larger_of_both_thresholds():
    assert FlowConfig(dust_threshold=5, min_edge_capacity=2).search_floor == 5
    assert FlowConfig(dust_threshold=2, min_edge_capacity=7).search_floor == 7


def test_with_overrides_returns_new_instance():
    custom = DEFAULT_FLOW_CONFIG.with_overrides(dust_threshold=10, max_hops=4)

    assert custom.dust_threshold == 10
    assert custom.max_hops == 4
    assert DEFAULT_FLOW_CONFIG.dust_threshold == 1
    assert DEFAULT_FLOW_CONFIG.max_hops is None


def test_config_is_frozen():
    with pytest.raises(AttributeError):
        DEFAULT_FLOW_CONFIG.dust_threshold = 3  # type: ignore[misc]


@pytest.mark.parametrize(
    "overrides",
    [
        {"dust_threshold": -1},
        {"min_edge_capacity": 1.5},
        {"min_edge_capacity": True},
        {"max_attempts_per_scale": 0},
        {"max_hops": 0},
        {"max_hops": "3"},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValueError):
        FlowConfig(**overrides)
