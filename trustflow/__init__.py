"""trustflow: max-flow routing over trust networks.

trustflow computes how much value can move from one account to another through
a network of balances and trust limits, and returns it as an ordered list of
elementary transfers that can be executed one after another.

Primary API:
    compute_flow() - Route a FlowRequest through a CapacityGraph
    compute_flow_from_config() - Same, building the graph from trust/balance maps
    build_capacity_graph() - Build a ledger-backed graph
    CapacityGraph, TrustLedger - Graph and bookkeeping types
    FlowRequest, FlowResult, Transfer - Request/result containers

Example:
    from trustflow import FlowRequest, compute_flow_from_config

    trust = {("B", "A"): 100, ("C", "A"): 50}
    balances = {("A", "A"): 80}
    result = compute_flow_from_config(trust, balances, FlowRequest("A", "B", 60))
    print(result.achieved_flow, result.transfers)
"""

from __future__ import annotations

from trustflow import logging
from trustflow._version import __version__
from trustflow.algorithms.max_flow import calc_max_flow, calc_max_flow_scaled
from trustflow.algorithms.search import find_path
from trustflow.algorithms.types import AugmentationResult
from trustflow.config import DEFAULT_FLOW_CONFIG, FlowConfig
from trustflow.graph.capacity_graph import CapacityGraph
from trustflow.graph.convert import build_capacity_graph
from trustflow.graph.ledger import TrustLedger
from trustflow.solver.flow import compute_flow, compute_flow_from_config
from trustflow.transfers.pipeline import post_process_flow
from trustflow.transfers.verify import validate_transfers
from trustflow.types.base import U256_MAX, FlowAlgorithm, SearchStrategy
from trustflow.types.dto import AugmentationStep, FlowRequest, FlowResult, Transfer

__all__ = [
    # Version
    "__version__",
    # Graph
    "CapacityGraph",
    "TrustLedger",
    "build_capacity_graph",
    # Computation (primary API)
    "compute_flow",
    "compute_flow_from_config",
    "calc_max_flow",
    "calc_max_flow_scaled",
    "find_path",
    "post_process_flow",
    "validate_transfers",
    # Types
    "SearchStrategy",
    "FlowAlgorithm",
    "U256_MAX",
    "FlowRequest",
    "FlowResult",
    "Transfer",
    "AugmentationStep",
    "AugmentationResult",
    # Configuration
    "FlowConfig",
    "DEFAULT_FLOW_CONFIG",
    # Utilities
    "logging",
]
