"""Request-credit ledger.

The ledger owns no data of its own: balances live on ``User.requests_number``
and every read or write goes through the user's lock. ``charge`` expects the
caller to already hold that lock (see ``QuotaGate.run``) so the balance check
and the decrement form one critical section.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator

from app.core.errors import QuotaExhaustedAppError
from app.services.identity_store import User

logger = logging.getLogger(__name__)


def quota_exhausted_error() -> QuotaExhaustedAppError:
    return QuotaExhaustedAppError(
        code="too_many_requests",
        message="Your request max number has been exhausted.",
        details={"requests_number": 0},
    )


class QuotaLedger:
    """Reads, debits and credits request balances."""

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._clock = clock

    @contextmanager
    def hold(self, user: User) -> Iterator[User]:
        """Hold the user's lock for a check-then-act sequence."""
        with user.lock:
            yield user

    def balance(self, user: User) -> int:
        with user.lock:
            return user.requests_number

    def charge(self, user: User) -> int:
        """Debit one credit. Caller must hold ``user.lock``.

        Returns:
            The balance after the debit.

        Raises:
            QuotaExhaustedAppError: The balance is already zero.
        """
        if user.requests_number <= 0:
            raise quota_exhausted_error()
        user.requests_number -= 1
        logger.info(
            "quota.charged",
            extra={"user_id": user.user_id, "remaining": user.requests_number},
        )
        return user.requests_number

    def credit(self, user: User, amount: int) -> int:
        """Add ``amount`` credits and stamp ``last_recharge``.

        Returns:
            The balance after the credit.
        """
        if amount < 0:
            raise ValueError("amount must be >= 0")
        with user.lock:
            user.requests_number += amount
            user.last_recharge = self._clock()
            balance = user.requests_number
        logger.info(
            "quota.credited",
            extra={"user_id": user.user_id, "amount": amount, "balance": balance},
        )
        return balance
