"""Request, result and step containers for flow computations.

Objects expose ``to_dict()`` returning JSON-safe primitives. Amounts are
rendered as decimal strings because 256-bit values do not fit JSON numbers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from trustflow.logging import get_logger
from trustflow.types.base import (
    Account,
    FlowAlgorithm,
    SearchStrategy,
    Token,
    validate_amount,
    validate_identifier,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class Transfer:
    """A single elementary transfer of ``amount`` units of ``token``.

    Attributes:
        source: Sending account.
        target: Receiving account.
        token: Token moved.
        amount: Quantity moved, a positive integer.
    """

    source: Account
    target: Account
    token: Token
    amount: int

    def __post_init__(self) -> None:
        validate_identifier(self.source)
        validate_identifier(self.target)
        validate_identifier(self.token, "token")
        validate_amount(self.amount)
        if self.amount == 0:
            raise ValueError("Transfer.amount must be positive")

    def to_dict(self) -> Dict[str, str]:
        """Return a JSON-serializable dictionary representation."""
        return {
            "from": self.source,
            "to": self.target,
            "token": self.token,
            "amount": str(self.amount),
        }


@dataclass(frozen=True)
class FlowRequest:
    """Parameters of one flow computation.

    Attributes:
        source: Account paying.
        sink: Account receiving.
        amount: Requested value to route.
        max_hops: Optional bound on path length in the search.
        max_transfers: Optional bound on the number of emitted transfers.
        strategy: Augmenting-path search strategy.
        algorithm: Max-flow variant.
    """

    source: Account
    sink: Account
    amount: int
    max_hops: Optional[int] = None
    max_transfers: Optional[int] = None
    strategy: SearchStrategy = SearchStrategy.BFS
    algorithm: FlowAlgorithm = FlowAlgorithm.AUGMENTING

    def __post_init__(self) -> None:
        """Validate fields early.

        Raises:
            TypeError: If identifiers or amounts have the wrong type.
            ValueError: If bounds are negative or names unknown.
        """
        validate_identifier(self.source)
        validate_identifier(self.sink)
        validate_amount(self.amount, "FlowRequest.amount")
        for name in ("max_hops", "max_transfers"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                logger.error("FlowRequest.%s must be a non-negative int: %r", name, value)
                raise ValueError(f"FlowRequest.{name} must be a non-negative int")
        # Accept names for convenience; frozen dataclass needs object.__setattr__
        if isinstance(self.strategy, str):
            object.__setattr__(
                self, "strategy", SearchStrategy.from_string(self.strategy)
            )
        if isinstance(self.algorithm, str):
            object.__setattr__(
                self, "algorithm", FlowAlgorithm.from_string(self.algorithm)
            )
        if not isinstance(self.strategy, SearchStrategy):
            raise TypeError(f"Unsupported search strategy: {self.strategy!r}")
        if not isinstance(self.algorithm, FlowAlgorithm):
            raise TypeError(f"Unsupported flow algorithm: {self.algorithm!r}")


@dataclass(frozen=True)
class FlowResult:
    """Outcome of a flow computation.

    Attributes:
        achieved_flow: Value delivered to the sink by ``transfers``.
        transfers: Ordered transfers; executing them in order never overdraws
            an intermediate account.
        requested_flow: The amount that was asked for.
    """

    achieved_flow: int
    transfers: Tuple[Transfer, ...] = ()
    requested_flow: int = 0

    @property
    def is_complete(self) -> bool:
        """True when the full requested amount was routed."""
        return self.achieved_flow >= self.requested_flow

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation."""
        return {
            "flow": str(self.achieved_flow),
            "requested": str(self.requested_flow),
            "transfers": [t.to_dict() for t in self.transfers],
        }


@dataclass(frozen=True)
class AugmentationStep:
    """One accepted augmentation, as reported to step observers.

    Attributes:
        total_flow: Flow accumulated including this step.
        path: Accounts from source to sink.
        path_flow: Flow pushed along ``path``.
        snapshot: Node-link dict of the residual graph after the push.
    """

    total_flow: int
    path: List[Account]
    path_flow: int
    snapshot: Dict[str, Any] = field(default_factory=dict)
