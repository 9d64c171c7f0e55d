from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol


class TokenClass(str, Enum):
    """The two independent token classes. Each is signed with its own key."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """
    A freshly minted token.

    :ivar token: Opaque signed string handed to the client.
    :ivar expires_at: Absolute expiry (UTC).
    :ivar expires_in: Lifetime in seconds at issuance.
    """

    token: str
    expires_at: datetime
    expires_in: int


class TokenCodec(Protocol):
    """
    Port for minting and verifying bearer tokens.

    Keys and lifetimes are bound at construction time. ``verify`` is total:
    malformed, expired, mis-signed or wrong-class input yields ``None``.
    """

    def issue_short_lived(self, principal_id: int) -> IssuedToken: ...

    def issue_long_lived(self, principal_id: int) -> IssuedToken: ...

    def verify(self, token: str, token_class: TokenClass) -> int | None: ...
