"""Process-wide service wiring.

``build_services`` constructs every stateful component exactly once; the app
factory stores the result on ``app.state.services`` and request handlers
reach it through the dependencies in ``app.api.dependencies``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from app.adapters.rate_limit import AbstractRateLimiter, InMemoryFixedWindowRateLimiter
from app.core.config import AppSettings
from app.core.quota import QuotaGate
from app.services.identity_store import IdentityStore
from app.services.item_store import DEFAULT_ITEMS, ItemStore
from app.services.quota_ledger import QuotaLedger


@dataclass
class ServiceContainer:
    settings: AppSettings
    identity_store: IdentityStore
    ledger: QuotaLedger
    quota_gate: QuotaGate
    item_store: ItemStore
    throttle: AbstractRateLimiter


def build_services(
    app_settings: AppSettings,
    *,
    clock: Callable[[], float] = time.time,
) -> ServiceContainer:
    """Build the stores and middleware components for one application.

    Args:
        app_settings: Application settings (credits, throttle limits, seeding).
        clock: UNIX-seconds time source shared by the throttle and the stores.

    Returns:
        A fully wired ServiceContainer.
    """

    def utcnow() -> datetime:
        return datetime.fromtimestamp(clock(), tz=timezone.utc)

    ledger = QuotaLedger(clock=utcnow)
    return ServiceContainer(
        settings=app_settings,
        identity_store=IdentityStore(
            initial_credits=app_settings.initial_credits,
            clock=utcnow,
        ),
        ledger=ledger,
        quota_gate=QuotaGate(ledger),
        item_store=ItemStore(DEFAULT_ITEMS if app_settings.seed_items else ()),
        throttle=InMemoryFixedWindowRateLimiter(
            limit=app_settings.throttle_max_attempts,
            window_seconds=app_settings.throttle_window_seconds,
            clock=clock,
        ),
    )
