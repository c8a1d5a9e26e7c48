"""Shared typing constructs for trustflow.

Aliases for accounts, tokens and edge keys, the 256-bit amount bounds, the
strategy/algorithm enums and the request/result containers.
"""

from trustflow.types.base import (
    U256_MAX,
    Account,
    EdgeKey,
    FlowAlgorithm,
    SearchStrategy,
    Token,
)
from trustflow.types.dto import AugmentationStep, FlowRequest, FlowResult, Transfer

__all__ = [
    # Enums
    "SearchStrategy",
    "FlowAlgorithm",
    # Type aliases and constants
    "Account",
    "Token",
    "EdgeKey",
    "U256_MAX",
    # DTOs
    "Transfer",
    "FlowRequest",
    "FlowResult",
    "AugmentationStep",
]
