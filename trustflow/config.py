"""Configuration classes for trustflow components."""

from dataclasses import dataclass, replace
from typing import Any, Optional


@dataclass(frozen=True)
class FlowConfig:
    """Numeric knobs of the max-flow algorithms."""

    # Augmentations below this amount are not worth pursuing; also the
    # minimum edge capacity considered by the direct algorithm
    dust_threshold: int = 1

    # Minimum edge capacity an edge needs to be part of an augmenting path
    min_edge_capacity: int = 1

    # Upper bound on augmentations within one capacity-scaling phase
    max_attempts_per_scale: int = 1000

    # Default hop bound when a request does not set one
    max_hops: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("dust_threshold", "min_edge_capacity", "max_attempts_per_scale"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"FlowConfig.{name} must be a non-negative int")
        if self.max_attempts_per_scale == 0:
            raise ValueError("FlowConfig.max_attempts_per_scale must be positive")
        if self.max_hops is not None and (
            not isinstance(self.max_hops, int) or self.max_hops < 1
        ):
            raise ValueError("FlowConfig.max_hops must be a positive int or None")

    @property
    def search_floor(self) -> int:
        """Minimum edge capacity used by direct augmentation."""
        return max(self.min_edge_capacity, self.dust_threshold)

    def with_overrides(self, **overrides: Any) -> "FlowConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)


# Global configuration instance
DEFAULT_FLOW_CONFIG = FlowConfig()
