"""Request-credit gate for quota-gated routes.

Routes call ``QuotaGate.run(user, handler)`` instead of returning directly:

    return gate.run(user, lambda: {"items": store.list_items()})

The gate holds the user's lock from the admission check to the debit, so two
concurrent requests on the last credit cannot both be admitted. The debit
happens only after the handler returned a payload; a handler that raises
(404, validation error, ...) leaves the balance untouched. The remaining
balance is added to the payload as ``requestsNumberRemaining``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from app.services.identity_store import User
from app.services.quota_ledger import QuotaLedger, quota_exhausted_error

logger = logging.getLogger(__name__)

REMAINING_FIELD = "requestsNumberRemaining"


class QuotaGate:
    def __init__(self, ledger: QuotaLedger) -> None:
        self._ledger = ledger

    def admit(self, user: User) -> None:
        """Reject the request when the user has no credits left.

        Callers that go on to charge must hold ``user.lock`` across both steps.

        Raises:
            QuotaExhaustedAppError: Balance is zero.
        """
        if user.requests_number <= 0:
            logger.warning("quota.exhausted", extra={"user_id": user.user_id})
            raise quota_exhausted_error()

    def run(
        self,
        user: User,
        handler: Callable[[], Mapping[str, Any]],
    ) -> dict[str, Any]:
        """Admit, run ``handler``, then charge exactly one credit.

        Args:
            user: Authenticated user being charged.
            handler: Zero-argument callable producing the success payload.

        Returns:
            The handler payload plus ``requestsNumberRemaining``.

        Raises:
            QuotaExhaustedAppError: Balance is zero; handler is not invoked.
        """
        with self._ledger.hold(user):
            self.admit(user)
            payload = handler()
            remaining = self._ledger.charge(user)
        return {**payload, REMAINING_FIELD: remaining}
