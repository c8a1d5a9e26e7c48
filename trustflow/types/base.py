"""Base aliases, numeric bounds and enums shared across trustflow."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Tuple

#: Account identifier (e.g. a hex address). Strings give a total order for tie-breaks.
Account = str

#: Token identifier. By default a token is issued by the account of the same id.
Token = str

#: Key of a directed per-token edge: ``(from_account, to_account, token)``.
EdgeKey = Tuple[Account, Account, Token]

#: Largest amount representable as an unsigned 256-bit integer.
U256_MAX = 2**256 - 1


class SearchStrategy(IntEnum):
    """Augmenting-path search strategies."""

    #: Level-by-level search from the source.
    BFS = 1
    #: Two frontiers, forward from the source and backward from the sink.
    BIDIRECTIONAL_BFS = 2

    @classmethod
    def from_string(cls, value: str) -> "SearchStrategy":
        """Parse a case-insensitive name (``"bfs"``, ``"bidirectional_bfs"``).

        Raises:
            ValueError: If the string doesn't match any enum member.
        """
        try:
            return cls[value.upper().replace("-", "_")]
        except KeyError:
            valid = ", ".join(e.name for e in cls)
            raise ValueError(
                f"Invalid search strategy '{value}'. Valid values are: {valid}"
            ) from None


class FlowAlgorithm(IntEnum):
    """Max-flow variants."""

    #: Repeated augmentation along shortest residual paths (Ford-Fulkerson).
    AUGMENTING = 1
    #: Augmentation restricted to edges above a halving capacity threshold.
    CAPACITY_SCALING = 2

    @classmethod
    def from_string(cls, value: str) -> "FlowAlgorithm":
        """Parse a case-insensitive name (``"augmenting"``, ``"capacity_scaling"``).

        Raises:
            ValueError: If the string doesn't match any enum member.
        """
        try:
            return cls[value.upper().replace("-", "_")]
        except KeyError:
            valid = ", ".join(e.name for e in cls)
            raise ValueError(
                f"Invalid flow algorithm '{value}'. Valid values are: {valid}"
            ) from None


def validate_identifier(value: Any, kind: str = "account") -> str:
    """Return ``value`` if it is a usable account/token identifier.

    Raises:
        TypeError: If ``value`` is not a string.
        ValueError: If ``value`` is empty.
    """
    if not isinstance(value, str):
        raise TypeError(f"{kind} identifier must be a string, got {value!r}")
    if not value:
        raise ValueError(f"{kind} identifier must be non-empty")
    return value


def validate_amount(value: Any, name: str = "amount") -> int:
    """Return ``value`` if it is an integer within ``[0, U256_MAX]``.

    Raises:
        TypeError: If ``value`` is not an ``int`` (booleans are rejected).
        ValueError: If ``value`` is negative.
        OverflowError: If ``value`` exceeds ``U256_MAX``.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    if value > U256_MAX:
        raise OverflowError(f"{name} exceeds the 256-bit range")
    return value
