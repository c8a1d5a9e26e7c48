"""Chain merging for transfer lists."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from trustflow.types.dto import Transfer


def simplify_transfers(transfers: Sequence[Transfer]) -> List[Transfer]:
    """Merge ``a -> b`` and ``b -> c`` of equal token and amount into ``a -> c``.

    Repeats until no such pair remains; pairs that would produce ``a -> a``
    are left alone. Running it again on its own output changes nothing.

    Args:
        transfers: Transfers in any order.

    Returns:
        A new list; a merged transfer takes the position of its first half.
    """
    result = list(transfers)
    while True:
        pair = _find_chain(result)
        if pair is None:
            return result
        i, j = pair
        first, second = result[i], result[j]
        result[i] = Transfer(first.source, second.target, first.token, first.amount)
        del result[j]


def _find_chain(transfers: List[Transfer]) -> Optional[Tuple[int, int]]:
    for i, first in enumerate(transfers):
        for j, second in enumerate(transfers):
            if (
                i != j
                and first.target == second.source
                and first.token == second.token
                and first.amount == second.amount
                and first.source != second.target
            ):
                return i, j
    return None
