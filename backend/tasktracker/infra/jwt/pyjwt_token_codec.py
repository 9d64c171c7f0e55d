from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from tasktracker.services._shared.clock import now_utc
from tasktracker.services._shared.ports import IssuedToken, TokenClass, TokenCodec

logger = logging.getLogger(__name__)

_REQUIRED_CLAIMS = ["sub", "iat", "exp", "type", "jti"]


@dataclass(slots=True)
class JWTTokenCodec(TokenCodec):
    """
    HMAC JWT codec with one signing key per token class.

    Claims are ``sub`` (stringified principal id), ``iat``, ``exp``,
    ``type`` and a random ``jti`` so that two tokens minted in the same
    second never collide.

    :param access_secret: Key for short-lived access tokens.
    :param refresh_secret: Key for long-lived refresh tokens.
    :param access_ttl: Access token lifetime in seconds.
    :param refresh_ttl: Refresh token lifetime in seconds.
    :param algorithm: HMAC algorithm understood by PyJWT.
    :param clock: Source of "now"; injectable for tests.
    """

    access_secret: str
    refresh_secret: str
    access_ttl: int = 3600
    refresh_ttl: int = 7 * 24 * 3600
    algorithm: str = "HS256"
    clock: Callable[[], datetime] = field(default=now_utc)

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("Both access and refresh secrets are required.")
        if self.access_secret == self.refresh_secret:
            raise ValueError("Access and refresh secrets must differ.")

    # -------------------- helpers --------------------

    def _secret(self, token_class: TokenClass) -> str:
        return self.access_secret if token_class is TokenClass.ACCESS else self.refresh_secret

    def _ttl(self, token_class: TokenClass) -> int:
        return self.access_ttl if token_class is TokenClass.ACCESS else self.refresh_ttl

    def _issue(self, principal_id: int, token_class: TokenClass) -> IssuedToken:
        issued_at = self.clock().replace(microsecond=0)
        ttl = self._ttl(token_class)
        expires_at = issued_at + timedelta(seconds=ttl)
        payload: dict[str, Any] = {
            "sub": str(principal_id),
            "iat": issued_at,
            "exp": expires_at,
            "type": token_class.value,
            "jti": uuid4().hex,
        }
        token = jwt.encode(payload, self._secret(token_class), algorithm=self.algorithm)
        return IssuedToken(token=token, expires_at=expires_at, expires_in=ttl)

    # -------------------- API ------------------------

    def issue_short_lived(self, principal_id: int) -> IssuedToken:
        return self._issue(principal_id, TokenClass.ACCESS)

    def issue_long_lived(self, principal_id: int) -> IssuedToken:
        return self._issue(principal_id, TokenClass.REFRESH)

    def verify(self, token: str, token_class: TokenClass) -> int | None:
        """
        Return the principal id carried by ``token`` or ``None``.

        Never raises: signature, expiry, shape and class mismatches all map to
        ``None``.
        """
        if not isinstance(token, str) or not token:
            return None
        try:
            claims = jwt.decode(
                token,
                self._secret(token_class),
                algorithms=[self.algorithm],
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.PyJWTError as exc:
            logger.debug("Token rejected: %s", type(exc).__name__)
            return None

        if claims.get("type") != token_class.value:
            return None
        try:
            return int(claims["sub"])
        except (TypeError, ValueError):
            return None
