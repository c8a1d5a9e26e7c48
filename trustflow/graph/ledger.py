"""Balance and trust bookkeeping behind edge capacities.

A `TrustLedger` answers how much of a token one account can currently push to
another: the sender's balance bounds it, and so does the receiver's remaining
trust towards the token's issuer. Tokens returning to their issuer are not
bounded by trust.

Headroom is tracked through *net receipts* per issuer: receiving any token of
an issuer raises the receiver's net receipt towards that issuer, sending one
lowers the sender's. All tokens of one issuer therefore share the single trust
limit the receiver extends to it. Because sending frees headroom, undoing a
transfer (pushing it back along the reverse edge) is always possible, which the
residual graph relies on.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Set, Tuple

from trustflow.logging import get_logger
from trustflow.types.base import (
    U256_MAX,
    Account,
    Token,
    validate_amount,
    validate_identifier,
)

logger = get_logger(__name__)


class TrustLedger:
    """Mutable balances, trust limits and net receipts for one computation.

    Args:
        trust_limits: ``(truster, trusted) -> limit``; the largest amount of
            ``trusted``'s token ``truster`` accepts.
        balances: ``(holder, token) -> amount``.
        issuers: Optional ``token -> issuer``. Tokens without an entry are
            issued by the account of the same identifier.

    Raises:
        TypeError, ValueError, OverflowError: On malformed ids or amounts.
    """

    def __init__(
        self,
        trust_limits: Optional[Mapping[Tuple[Account, Account], int]] = None,
        balances: Optional[Mapping[Tuple[Account, Token], int]] = None,
        issuers: Optional[Mapping[Token, Account]] = None,
    ) -> None:
        self._trust: Dict[Tuple[Account, Account], int] = {}
        self._balances: Dict[Tuple[Account, Token], int] = {}
        self._issuers: Dict[Token, Account] = {}
        # (account, issuer) -> net amount of the issuer's tokens received
        self._received: Dict[Tuple[Account, Account], int] = {}

        for (truster, trusted), limit in (trust_limits or {}).items():
            validate_identifier(truster)
            validate_identifier(trusted)
            self._trust[(truster, trusted)] = validate_amount(limit, "trust limit")
        for (holder, token), amount in (balances or {}).items():
            validate_identifier(holder)
            validate_identifier(token, "token")
            self._balances[(holder, token)] = validate_amount(amount, "balance")
        for token, issuer in (issuers or {}).items():
            self._issuers[validate_identifier(token, "token")] = validate_identifier(
                issuer
            )

    #
    # Queries
    #
    def issuer(self, token: Token) -> Account:
        """Return the account that issued ``token``."""
        return self._issuers.get(token, token)

    def balance(self, holder: Account, token: Token) -> int:
        """Return ``holder``'s current balance of ``token``."""
        return self._balances.get((holder, token), 0)

    def trust_limit(self, truster: Account, trusted: Account) -> int:
        """Return the configured trust limit (0 when absent)."""
        return self._trust.get((truster, trusted), 0)

    def net_received(self, account: Account, token: Token) -> int:
        """Return ``account``'s net receipts of tokens from ``token``'s issuer."""
        return self._received.get((account, self.issuer(token)), 0)

    def headroom(self, receiver: Account, token: Token) -> Optional[int]:
        """Return how much more of ``token`` ``receiver`` accepts.

        Returns:
            ``None`` when unbounded (the receiver issued the token).
        """
        issuer = self.issuer(token)
        if receiver == issuer:
            return None
        return self.trust_limit(receiver, issuer) - self.net_received(receiver, token)

    def limit(self, sender: Account, receiver: Account, token: Token) -> int:
        """Return the largest amount of ``token`` movable from sender to receiver."""
        available = self.balance(sender, token)
        headroom = self.headroom(receiver, token)
        if headroom is None:
            return available
        return max(0, min(available, headroom))

    def accounts(self) -> Set[Account]:
        """Return every account mentioned by trust, balances or issuers."""
        found = set(self._issuers.values())
        for truster, trusted in self._trust:
            found.add(truster)
            found.add(trusted)
        for holder, _token in self._balances:
            found.add(holder)
        return found

    def holdings(self) -> Dict[Tuple[Account, Token], int]:
        """Return a copy of all positive balances."""
        return {key: value for key, value in self._balances.items() if value > 0}

    def trusters_of(self, issuer: Account) -> Dict[Account, int]:
        """Return ``truster -> limit`` for every positive trust towards ``issuer``."""
        return {
            truster: limit
            for (truster, trusted), limit in self._trust.items()
            if trusted == issuer and limit > 0
        }

    #
    # Mutation
    #
    def check_move(
        self, sender: Account, receiver: Account, token: Token, amount: int
    ) -> None:
        """Raise if `move` would reject the movement; never changes state.

        Raises:
            ValueError: If the movement exceeds balance or headroom.
            OverflowError: If the receiver's balance would leave the 256-bit range.
        """
        validate_amount(amount)
        limit = self.limit(sender, receiver, token)
        if amount > limit:
            logger.error(
                "Ledger move %s -> %s (%s) of %d exceeds limit %d",
                sender,
                receiver,
                token,
                amount,
                limit,
            )
            raise ValueError(
                f"Cannot move {amount} of '{token}' from '{sender}' to '{receiver}'"
            )
        if self.balance(receiver, token) + amount > U256_MAX:
            logger.error("Balance of %s in %s would overflow", receiver, token)
            raise OverflowError(f"Balance of '{receiver}' in '{token}' overflows")

    def move(self, sender: Account, receiver: Account, token: Token, amount: int) -> None:
        """Move ``amount`` of ``token`` from ``sender`` to ``receiver``.

        All checks run before any state changes.

        Raises:
            ValueError: If the movement exceeds balance or headroom.
            OverflowError: If the receiver's balance would leave the 256-bit range.
        """
        self.check_move(sender, receiver, token, amount)

        issuer = self.issuer(token)
        self._balances[(sender, token)] = self.balance(sender, token) - amount
        self._balances[(receiver, token)] = self.balance(receiver, token) + amount
        if receiver != issuer:
            key = (receiver, issuer)
            self._received[key] = self._received.get(key, 0) + amount
        if sender != issuer:
            key = (sender, issuer)
            self._received[key] = self._received.get(key, 0) - amount

    def copy(self) -> "TrustLedger":
        """Return an independent copy."""
        clone = TrustLedger.__new__(TrustLedger)
        clone._trust = dict(self._trust)
        clone._balances = dict(self._balances)
        clone._issuers = dict(self._issuers)
        clone._received = dict(self._received)
        return clone
