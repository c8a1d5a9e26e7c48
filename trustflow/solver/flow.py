"""Flow computation entry points.

`compute_flow` runs one request end to end: it copies the graph into a private
residual graph, runs the selected max-flow variant with the selected search
strategy, and post-processes the raw flow into ordered transfers. The input
graph is never modified, so several computations may share it read-only.
"""

from __future__ import annotations

import time
from typing import Mapping, Optional, Tuple

from trustflow.algorithms.max_flow import calc_max_flow, calc_max_flow_scaled
from trustflow.algorithms.types import StepObserver
from trustflow.config import DEFAULT_FLOW_CONFIG, FlowConfig
from trustflow.graph.capacity_graph import CapacityGraph
from trustflow.graph.convert import build_capacity_graph
from trustflow.logging import get_logger
from trustflow.transfers.pipeline import post_process_flow
from trustflow.types.base import Account, FlowAlgorithm, Token
from trustflow.types.dto import FlowRequest, FlowResult

logger = get_logger(__name__)

_ALGORITHMS = {
    FlowAlgorithm.AUGMENTING: calc_max_flow,
    FlowAlgorithm.CAPACITY_SCALING: calc_max_flow_scaled,
}


def compute_flow(
    graph: CapacityGraph,
    request: FlowRequest,
    config: FlowConfig = DEFAULT_FLOW_CONFIG,
    observer: Optional[StepObserver] = None,
) -> FlowResult:
    """Compute an ordered transfer list routing ``request.amount``.

    Args:
        graph: Capacity graph; treated as read-only.
        request: Source, sink, amount, bounds, strategy and algorithm.
        config: Numeric thresholds for the algorithms.
        observer: Optional callable receiving every accepted augmentation.

    Returns:
        FlowResult: Achieved flow (possibly zero) and ordered transfers.

    Raises:
        KeyError: If the source or sink is not in the graph.
    """
    for role, account in (("source", request.source), ("sink", request.sink)):
        if account not in graph:
            logger.error("Unknown %s account: %s", role, account)
            raise KeyError(f"{role.capitalize()} account '{account}' is not in the graph.")

    if request.source == request.sink or request.amount == 0:
        return FlowResult(achieved_flow=0, transfers=(), requested_flow=request.amount)

    started = time.perf_counter()
    algorithm = _ALGORITHMS[request.algorithm]
    raw = algorithm(
        graph.copy(),
        request.source,
        request.sink,
        request.amount,
        strategy=request.strategy,
        max_hops=request.max_hops,
        config=config,
        observer=observer,
        copy_graph=False,
    )
    flow, transfers = post_process_flow(
        raw.used_edges,
        request.source,
        request.sink,
        request.amount,
        max_transfers=request.max_transfers,
    )

    logger.info(
        "Flow %s -> %s: %d of %d in %d transfers (%d augmentations, %s/%s, %.3fs)",
        request.source,
        request.sink,
        flow,
        request.amount,
        len(transfers),
        raw.augmentations,
        request.algorithm.name.lower(),
        request.strategy.name.lower(),
        time.perf_counter() - started,
    )
    return FlowResult(
        achieved_flow=flow, transfers=tuple(transfers), requested_flow=request.amount
    )


def compute_flow_from_config(
    trust_limits: Mapping[Tuple[Account, Account], int],
    balances: Mapping[Tuple[Account, Token], int],
    request: FlowRequest,
    issuers: Optional[Mapping[Token, Account]] = None,
    config: FlowConfig = DEFAULT_FLOW_CONFIG,
    observer: Optional[StepObserver] = None,
) -> FlowResult:
    """Build a graph from trust and balance records, then run `compute_flow`.

    Raises:
        KeyError: If the source or sink does not appear in the records.
        TypeError, ValueError, OverflowError: On malformed records.
    """
    graph = build_capacity_graph(trust_limits, balances, issuers)
    return compute_flow(graph, request, config=config, observer=observer)
