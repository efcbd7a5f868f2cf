"""Bearer token authentication.

Tokens are opaque identifiers issued by ``/register``. Possession of a token
is the only proof of identity: there is no expiry and no signature.

Design principles:
- Pure parsing/validation functions for easy unit testing
- FastAPI dependency (``get_current_user``) for route wiring
- Tokens never reach the logs; a short hash is logged instead
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Header, Request

from app.api.dependencies import get_identity_store
from app.core.errors import AuthenticationAppError
from app.core.logging import hash_secret, set_user_id
from app.services.identity_store import IdentityStore, User

logger = logging.getLogger(__name__)


def parse_authorization_header(value: str | None) -> str | None:
    """Extract the token from an ``Authorization: <scheme> <token>`` header.

    The header is split on whitespace and the second element is taken; the
    scheme itself is not checked.

    Examples:
        >>> parse_authorization_header("Bearer abc")
        'abc'
        >>> parse_authorization_header("  Token   abc  ")
        'abc'
        >>> parse_authorization_header("abc") is None
        True
        >>> parse_authorization_header(None) is None
        True
    """
    if not value:
        return None
    parts = value.split()
    if len(parts) < 2:
        return None
    return parts[1]


def _invalid_token() -> AuthenticationAppError:
    return AuthenticationAppError(
        code="invalid_token",
        message="Invalid or missing token",
    )


def authenticate(store: IdentityStore, authorization: str | None) -> User:
    """Resolve an Authorization header value to a registered user.

    Args:
        store: Identity store to look the token up in.
        authorization: Raw Authorization header value.

    Returns:
        The user owning the token.

    Raises:
        AuthenticationAppError: Header absent, malformed, or token unknown.
    """
    token = parse_authorization_header(authorization)
    if token is None:
        logger.warning(
            "auth.failed",
            extra={"reason": "missing_token", "header_present": authorization is not None},
        )
        raise _invalid_token()

    user = store.lookup(token)
    if user is None:
        logger.warning(
            "auth.failed",
            extra={"reason": "unknown_token", "token_hash": hash_secret(token)},
        )
        raise _invalid_token()

    return user


def get_current_user(
    request: Request,
    store: Annotated[IdentityStore, Depends(get_identity_store)],
    authorization: Annotated[str | None, Header()] = None,
) -> User:
    """FastAPI dependency returning the authenticated user.

    The user is also attached to ``request.state.user`` and bound to the
    logging context for the rest of the request.

    Usage:
        @router.get("/protected")
        def protected(user: Annotated[User, Depends(get_current_user)]): ...

    Raises:
        AuthenticationAppError: Rendered as 401 by the global handler.
    """
    user = authenticate(store, authorization)
    request.state.user = user
    set_user_id(user.user_id)
    logger.info("auth.success", extra={"user_id": user.user_id})
    return user
