"""Recharge use case: parse the requested amount and credit the user."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

from app.services.identity_store import User
from app.services.quota_ledger import QuotaLedger

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class RechargeOutcome:
    amount: int
    balance: int


def parse_amount(raw: Any) -> int | None:
    """Read an integer the way a lenient integer parse would.

    Ints pass through, floats are truncated, strings contribute their leading
    integer ("12abc" -> 12). Anything else (None, bools, lists, "abc", NaN)
    yields None.
    """
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else None
    if isinstance(raw, str):
        match = _LEADING_INT.match(raw)
        return int(match.group(1)) if match else None
    return None


def resolve_recharge_amount(raw: Any, default: int) -> int:
    """Amount to credit: the parsed value when positive, otherwise ``default``.

    >>> resolve_recharge_amount(25, 10)
    25
    >>> resolve_recharge_amount(-5, 10)
    10
    >>> resolve_recharge_amount("abc", 10)
    10
    """
    amount = parse_amount(raw)
    if amount is None or amount <= 0:
        return default
    return amount


def recharge(ledger: QuotaLedger, user: User, raw_amount: Any, *, default: int) -> RechargeOutcome:
    amount = resolve_recharge_amount(raw_amount, default)
    balance = ledger.credit(user, amount)
    return RechargeOutcome(amount=amount, balance=balance)
