"""Per-IP registration throttle for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer for the
account routes (``/register`` and ``/recharge``).

Throttle strategy:
- Fixed window per client IP (default 5 attempts per 60 minutes).
- Callers presenting a bearer token that still has credits are never
  throttled and their attempts are not counted.
- A blocked attempt does not change any counter.
- Dependencies are plain ``def`` so the store and user locks are taken in
  the worker threadpool, never on the event loop.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Header, Request

from app.api.dependencies import get_services
from app.core.auth import parse_authorization_header
from app.core.container import ServiceContainer
from app.core.errors import TooManyAttemptsAppError

logger = logging.getLogger(__name__)


def resolve_client_ip(request: Request, *, trust_forwarded_for: bool = False) -> str:
    """Return the client IP used for registration bookkeeping.

    Args:
        request: FastAPI request.
        trust_forwarded_for: Use the first ``X-Forwarded-For`` entry when set.
            Only safe behind a proxy that overwrites the header.

    Returns:
        str: Client IP, or ``"unknown"`` when the transport gives none.
    """
    if trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first

    return request.client.host if request.client else "unknown"


def _build_throttle_key(client_ip: str) -> str:
    return f"ip:{client_ip}"


def get_client_ip(
    request: Request,
    services: Annotated[ServiceContainer, Depends(get_services)],
) -> str:
    return resolve_client_ip(
        request, trust_forwarded_for=services.settings.trust_forwarded_for
    )


def enforce_registration_throttle(
    services: Annotated[ServiceContainer, Depends(get_services)],
    client_ip: Annotated[str, Depends(get_client_ip)],
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """FastAPI dependency enforcing the per-IP attempt limit.

    Args:
        services: Shared service container.
        client_ip: Resolved client IP.
        authorization: Optional bearer header used for the funded-token bypass.

    Raises:
        TooManyAttemptsAppError: 429 when the IP exceeded its attempts.
    """
    cfg = services.settings
    if not cfg.throttle_enabled:
        return

    token = parse_authorization_header(authorization)
    if token and services.identity_store.is_funded(token):
        logger.debug("throttle.bypassed", extra={"reason": "funded_token"})
        return

    result = services.throttle.consume(_build_throttle_key(client_ip))
    if result.allowed:
        logger.info(
            "throttle.allowed",
            extra={
                "client_ip": client_ip,
                "limit": result.limit,
                "remaining": result.remaining,
                "window_s": cfg.throttle_window_seconds,
            },
        )
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "throttle.exceeded",
        extra={
            "client_ip": client_ip,
            "limit": result.limit,
            "window_s": cfg.throttle_window_seconds,
            "retry_after_s": retry_after,
        },
    )

    details = None
    if cfg.throttle_include_headers:
        details = {
            "retry_after": retry_after,
            "limit": result.limit,
            "remaining": result.remaining,
            "reset_at": result.reset_at,
        }

    raise TooManyAttemptsAppError(
        code="too_many_attempts",
        message="Too many attempts. Please register again to get a new token",
        details=details,
    )
