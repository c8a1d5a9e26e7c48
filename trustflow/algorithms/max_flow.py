"""Maximum-flow computation via iterative augmentation.

Two variants share the same path search, placement and bookkeeping:

* `calc_max_flow` repeatedly augments along shortest residual paths
  (Ford-Fulkerson with BFS, i.e. Edmonds-Karp when unconstrained).
* `calc_max_flow_scaled` restricts the search to edges whose capacity is at
  least a threshold that starts at the largest power of two not above the
  maximum edge capacity and halves each phase (capacity scaling).

Both stop once the target ``min(requested, estimate_max_flow)`` is reached or
no further path exists. No path is a regular outcome, not an error.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from trustflow.algorithms.augment import place_flow_on_path
from trustflow.algorithms.search import find_path
from trustflow.algorithms.types import AugmentationResult, StepObserver
from trustflow.config import DEFAULT_FLOW_CONFIG, FlowConfig
from trustflow.graph.capacity_graph import CapacityGraph
from trustflow.logging import get_logger
from trustflow.types.base import Account, EdgeKey, SearchStrategy, validate_amount
from trustflow.types.dto import AugmentationStep

logger = get_logger(__name__)


def calc_max_flow(
    graph: CapacityGraph,
    src_node: Account,
    dst_node: Account,
    requested: int,
    *,
    strategy: SearchStrategy = SearchStrategy.BFS,
    max_hops: Optional[int] = None,
    config: FlowConfig = DEFAULT_FLOW_CONFIG,
    observer: Optional[StepObserver] = None,
    copy_graph: bool = True,
) -> AugmentationResult:
    """Route up to ``requested`` from ``src_node`` to ``dst_node`` by direct augmentation.

    Each iteration searches for a path whose edges all have at least
    ``config.search_floor`` capacity, with the remaining target as flow ceiling,
    and pushes the path's flow. An augmentation smaller than
    ``config.dust_threshold`` is discarded and ends the run.

    Args:
        graph: Capacity graph.
        src_node: Source account.
        dst_node: Sink account.
        requested: Amount the caller wants routed.
        strategy: Path search strategy.
        max_hops: Optional path length bound; defaults to ``config.max_hops``.
        config: Numeric thresholds.
        observer: Optional callable notified after every accepted augmentation.
        copy_graph: If True, work on a copy so ``graph`` remains unmodified.

    Returns:
        AugmentationResult: Delivered flow and the net flow per used edge.

    Raises:
        KeyError: If either account is not in the graph.
        TypeError, ValueError, OverflowError: If ``requested`` is malformed.
    """
    validate_amount(requested, "requested flow")
    flow_graph = graph.copy() if copy_graph else graph
    target = _initial_target(flow_graph, src_node, dst_node, requested)
    if max_hops is None:
        max_hops = config.max_hops

    used_edges: Dict[EdgeKey, int] = {}
    total_flow = 0
    augmentations = 0

    while total_flow < target:
        path_flow, path = find_path(
            flow_graph,
            src_node,
            dst_node,
            target - total_flow,
            max_hops=max_hops,
            min_edge_capacity=config.search_floor,
            strategy=strategy,
        )
        if path_flow == 0:
            logger.debug("No augmenting path left after %d augmentations", augmentations)
            break
        if path_flow < config.dust_threshold:
            logger.debug("Discarding dust augmentation of %d", path_flow)
            break

        place_flow_on_path(flow_graph, path, path_flow, used_edges)
        total_flow += path_flow
        augmentations += 1
        logger.debug(
            "Augmentation %d: pushed %d along %s (total %d)",
            augmentations,
            path_flow,
            path,
            total_flow,
        )
        _notify(observer, flow_graph, total_flow, path, path_flow)

    return AugmentationResult(
        total_flow=total_flow, used_edges=used_edges, augmentations=augmentations
    )


def calc_max_flow_scaled(
    graph: CapacityGraph,
    src_node: Account,
    dst_node: Account,
    requested: int,
    *,
    strategy: SearchStrategy = SearchStrategy.BFS,
    max_hops: Optional[int] = None,
    config: FlowConfig = DEFAULT_FLOW_CONFIG,
    observer: Optional[StepObserver] = None,
    copy_graph: bool = True,
) -> AugmentationResult:
    """Route up to ``requested`` using capacity scaling.

    Phases run with a capacity floor of ``max(scale, config.dust_threshold)``.
    Within a phase, at most ``config.max_attempts_per_scale`` augmentations are
    accepted; the phase also ends when no path clears the floor, when a path's
    flow is below the dust threshold (discarded), or when the target is
    reached. ``scale`` then halves until it reaches zero.

    Args:
        graph: Capacity graph.
        src_node: Source account.
        dst_node: Sink account.
        requested: Amount the caller wants routed.
        strategy: Path search strategy.
        max_hops: Optional path length bound; defaults to ``config.max_hops``.
        config: Numeric thresholds.
        observer: Optional callable notified after every accepted augmentation.
        copy_graph: If True, work on a copy so ``graph`` remains unmodified.

    Returns:
        AugmentationResult: Delivered flow and the net flow per used edge.

    Raises:
        KeyError: If either account is not in the graph.
        TypeError, ValueError, OverflowError: If ``requested`` is malformed.
    """
    validate_amount(requested, "requested flow")
    flow_graph = graph.copy() if copy_graph else graph
    target = _initial_target(flow_graph, src_node, dst_node, requested)
    if max_hops is None:
        max_hops = config.max_hops

    used_edges: Dict[EdgeKey, int] = {}
    total_flow = 0
    augmentations = 0
    scale = _largest_power_of_two(flow_graph.max_capacity()) if target > 0 else 0

    while scale > 0 and total_flow < target:
        floor = max(scale, config.dust_threshold)
        attempts = 0
        while attempts < config.max_attempts_per_scale and total_flow < target:
            path_flow, path = find_path(
                flow_graph,
                src_node,
                dst_node,
                target - total_flow,
                max_hops=max_hops,
                min_edge_capacity=floor,
                strategy=strategy,
            )
            if path_flow == 0:
                break
            if path_flow < config.dust_threshold:
                logger.debug("Discarding dust augmentation of %d", path_flow)
                break

            place_flow_on_path(flow_graph, path, path_flow, used_edges)
            total_flow += path_flow
            augmentations += 1
            attempts += 1
            _notify(observer, flow_graph, total_flow, path, path_flow)

        logger.debug(
            "Scale %d done: %d augmentations, total %d", scale, attempts, total_flow
        )
        scale //= 2

    return AugmentationResult(
        total_flow=total_flow, used_edges=used_edges, augmentations=augmentations
    )


def _initial_target(
    graph: CapacityGraph, src_node: Account, dst_node: Account, requested: int
) -> int:
    """Return ``min(requested, estimate_max_flow)``; raises KeyError on unknown nodes."""
    estimate = graph.estimate_max_flow(src_node, dst_node)
    target = min(requested, estimate)
    logger.debug(
        "Flow target %s -> %s: requested %d, estimate %d", src_node, dst_node, requested, estimate
    )
    return target


def _largest_power_of_two(value: int) -> int:
    """Return the largest power of two not exceeding ``value`` (0 for 0)."""
    if value <= 0:
        return 0
    return 1 << (value.bit_length() - 1)


def _notify(
    observer: Optional[StepObserver],
    graph: CapacityGraph,
    total_flow: int,
    path: List[Account],
    path_flow: int,
) -> None:
    if observer is None:
        return
    observer(
        AugmentationStep(
            total_flow=total_flow,
            path=list(path),
            path_flow=path_flow,
            snapshot=graph.to_dict(),
        )
    )
