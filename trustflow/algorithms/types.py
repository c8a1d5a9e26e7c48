"""Types and data structures for algorithm outputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict

from trustflow.types.base import EdgeKey
from trustflow.types.dto import AugmentationStep

#: Callable notified after each accepted augmentation.
StepObserver = Callable[[AugmentationStep], None]


@dataclass(frozen=True)
class AugmentationResult:
    """Raw outcome of a max-flow run, before post-processing.

    Attributes:
        total_flow: Flow delivered to the sink.
        used_edges: Net flow per ``(from, to, token)``; opposite flows cancelled.
        augmentations: Number of accepted augmenting paths.
    """

    total_flow: int
    used_edges: Dict[EdgeKey, int] = field(default_factory=dict)
    augmentations: int = 0
