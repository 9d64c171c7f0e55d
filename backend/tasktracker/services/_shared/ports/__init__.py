"""
tasktracker.services._shared.ports
==================================

Hexagonal *ports* for the authentication infrastructure.

Modules
-------
- :mod:`token_codec`:
    :class:`~.TokenCodec`, :class:`~.TokenClass`, :class:`~.IssuedToken`:
    minting and verifying the two token classes.

- :mod:`session_store`:
    :class:`~.SessionStore`, :class:`~.SessionRecord` and the in-memory
    :class:`~.InMemorySessionStore`: server-side refresh session state.

Concrete adapters (PyJWT, SQL, Redis) live under ``tasktracker.infra``.
"""

from __future__ import annotations

from .session_store import InMemorySessionStore, SessionRecord, SessionStore, hash_token
from .token_codec import IssuedToken, TokenClass, TokenCodec

__all__ = [
    "InMemorySessionStore",
    "IssuedToken",
    "SessionRecord",
    "SessionStore",
    "TokenClass",
    "TokenCodec",
    "hash_token",
]
