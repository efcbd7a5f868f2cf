"""In-memory identity store: registered users and the IP → token register.

Users are keyed by their opaque bearer token. Each client IP maps to the
token it was most recently issued; an IP may only obtain a new token once
the previous one has run out of request credits.

Users and IP records live for the whole process lifetime. Nothing expires
and nothing is garbage-collected, so memory grows with every registration.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from app.core.errors import AlreadyRegisteredAppError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    """A registered API consumer.

    Attributes:
        user_id: Opaque identifier, never exposed as a credential.
        token: Opaque bearer credential.
        requests_number: Remaining request credits (never negative).
        last_recharge: When credits were last granted (registration or recharge).
        ip: Client IP the token was issued to.
    """

    user_id: str
    token: str
    requests_number: int
    last_recharge: datetime
    ip: str
    lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    @property
    def is_funded(self) -> bool:
        return self.requests_number > 0


@dataclass(frozen=True)
class RegistrationResult:
    token: str
    requests_number: int


class IdentityStore:
    """Thread-safe owner of the user table and the IP registration table."""

    def __init__(
        self,
        *,
        initial_credits: int = 10,
        clock: Callable[[], datetime] = _utcnow,
        token_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        if initial_credits < 1:
            raise ValueError("initial_credits must be >= 1")

        self._initial_credits = initial_credits
        self._clock = clock
        self._new_id = token_factory
        self._lock = threading.RLock()
        self._users: dict[str, User] = {}
        self._ip_register: dict[str, str] = {}

    def _funded_token_for_ip_locked(self, client_ip: str) -> str | None:
        token = self._ip_register.get(client_ip)
        if token is None:
            return None
        user = self._users.get(token)
        if user is None:
            return None
        with user.lock:
            return token if user.is_funded else None

    def register(self, client_ip: str) -> RegistrationResult:
        """Issue a new token for ``client_ip``.

        Raises:
            AlreadyRegisteredAppError: The IP already holds a token with credits left.
        """
        with self._lock:
            if self._funded_token_for_ip_locked(client_ip) is not None:
                logger.warning(
                    "identity.already_registered",
                    extra={"client_ip": client_ip},
                )
                raise AlreadyRegisteredAppError(
                    code="already_registered",
                    message=(
                        "Already registered. You cannot register again while "
                        "you still have requests remaining."
                    ),
                )

            token = self._new_id()
            while token in self._users:
                token = self._new_id()

            user = User(
                user_id=self._new_id(),
                token=token,
                requests_number=self._initial_credits,
                last_recharge=self._clock(),
                ip=client_ip,
            )
            replaced = self._ip_register.get(client_ip)
            self._users[token] = user
            self._ip_register[client_ip] = token

        logger.info(
            "identity.registered",
            extra={
                "user_id": user.user_id,
                "client_ip": client_ip,
                "requests_number": user.requests_number,
                "replaced_exhausted_token": replaced is not None,
            },
        )
        return RegistrationResult(
            token=token,
            requests_number=user.requests_number,
        )

    def lookup(self, token: str | None) -> User | None:
        if not token:
            return None
        with self._lock:
            return self._users.get(token)

    def is_funded(self, token: str | None) -> bool:
        """True when ``token`` belongs to a user with credits left."""
        user = self.lookup(token)
        if user is None:
            return False
        with user.lock:
            return user.is_funded

    def token_for_ip(self, client_ip: str) -> str | None:
        with self._lock:
            return self._ip_register.get(client_ip)

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)
