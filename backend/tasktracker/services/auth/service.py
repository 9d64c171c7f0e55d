# tasktracker/services/auth/service.py
from __future__ import annotations

import functools
import logging

from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from tasktracker.models.user import User, UserRole
from tasktracker.repositories.user import UserRepository
from tasktracker.services._shared.base import BaseService, ServiceContext
from tasktracker.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    UnauthorizedError,
    violates,
)
from tasktracker.services._shared.ports import SessionStore, TokenClass, TokenCodec
from tasktracker.services.auth.dto import (
    LoginIn,
    LogoutIn,
    PrincipalOut,
    RefreshIn,
    RegisterIn,
    RegistrationOut,
    TokenPairOut,
)

logger = logging.getLogger(__name__)


@functools.cache
def _dummy_password_hash() -> str:
    # Checked against when the email is unknown so both login failures hash once
    return generate_password_hash("dummy-password-for-uniform-timing")


def _to_principal(user: User) -> PrincipalOut:
    return PrincipalOut(
        id=user.id,
        username=user.username,
        email=user.email,
        role=UserRole(user.role).value,
        created_at=user.created_at,
    )


class SessionService(BaseService):
    """
    Authentication lifecycle: register, login, refresh rotation, logout.

    Tokens are minted by a :class:`TokenCodec`; every refresh credential has
    a server-side record in a :class:`SessionStore`. A refresh credential is
    single use: rotation succeeds only for the caller whose conditional
    revoke flips the record.

    Failures never reveal which check failed (signature, lookup, expiry or
    revocation all surface as :class:`InvalidTokenError`).
    """

    def __init__(
        self,
        *,
        codec: TokenCodec,
        store: SessionStore,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param codec: Adapter minting/verifying access and refresh tokens.
        :param store: Server-side refresh session registry.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.codec = codec
        self.store = store

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> RegistrationOut:
        """
        Create a principal and issue its first credential pair.

        :raises ConflictError: When the email or the username is taken.
        """
        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                if repo.exists_by_email(dto.email):
                    raise ConflictError("User", "email already in use")
                if repo.exists_by_username(dto.username):
                    raise ConflictError("User", "username already taken")

                user = repo.model(username=dto.username, email=dto.email)
                user.password = dto.password
                repo.add(user)
                principal = _to_principal(user)
        except IntegrityError as exc:
            # Lost a race against a concurrent registration
            if violates(exc, "email"):
                raise ConflictError("User", "email already in use") from exc
            raise ConflictError("User", "username already taken") from exc

        logger.info("User registered", extra={"user_id": principal.id})
        return RegistrationOut(user=principal, tokens=self._issue_pair(principal.id))

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Authenticate credentials and issue a fresh pair.

        :raises InvalidCredentialsError: Unknown email or wrong password.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_by_email(dto.email)
            if user is None:
                check_password_hash(_dummy_password_hash(), dto.password)
                user_id = None
            else:
                user_id = user.id if user.verify_password(dto.password) else None

        if user_id is None:
            logger.warning("Login rejected")
            raise InvalidCredentialsError()

        logger.info("User logged in", extra={"user_id": user_id})
        return self._issue_pair(user_id)

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Exchange a refresh credential for a new pair, consuming it.

        Steps: verify signature and class, find the live server record,
        confirm the principal still exists, conditionally revoke, then mint.

        :raises InvalidTokenError: Bad, unknown, expired, revoked or already
            rotated credential.
        :raises UnauthorizedError: The principal no longer exists.
        """
        raw = dto.refresh_token
        principal_id = self.codec.verify(raw, TokenClass.REFRESH)
        if principal_id is None:
            raise InvalidTokenError()

        record = self.store.find_valid(raw)
        if record is None or record.principal_id != principal_id:
            raise InvalidTokenError()

        with self.ro_uow() as uow:
            exists = uow.users.exists_by_id(principal_id)
        if not exists:
            raise UnauthorizedError("User not found")

        if not self.store.revoke(record):
            # Another request rotated this credential first
            logger.warning("Refresh credential reuse", extra={"user_id": principal_id})
            raise InvalidTokenError()

        return self._issue_pair(principal_id)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """Revoke the given refresh credential if it is live. Always silent."""
        if not dto.refresh_token:
            return
        record = self.store.find_valid(dto.refresh_token)
        if record is not None and self.store.revoke(record):
            logger.info("User logged out", extra={"user_id": record.principal_id})

    def logout_all(self, principal_id: int) -> int:
        """Revoke every live refresh credential of ``principal_id``."""
        count = self.store.revoke_all_for(principal_id)
        logger.info("All sessions revoked", extra={"user_id": principal_id, "count": count})
        return count

    # ------------------------------------------------------------------ #
    # Bearer resolution
    # ------------------------------------------------------------------ #

    def current_principal(self, access_token: str) -> PrincipalOut:
        """
        Resolve an access token to its principal.

        :raises UnauthorizedError: Invalid token or vanished user.
        """
        principal_id = self.codec.verify(access_token, TokenClass.ACCESS)
        if principal_id is None:
            raise UnauthorizedError("Invalid or expired token")

        with self.ro_uow() as uow:
            user = uow.users.get(principal_id)
            if user is None:
                raise UnauthorizedError("User not found")
            return _to_principal(user)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _issue_pair(self, principal_id: int) -> TokenPairOut:
        access = self.codec.issue_short_lived(principal_id)
        refresh = self.codec.issue_long_lived(principal_id)
        self.store.put(principal_id, refresh.token, refresh.expires_at)
        return TokenPairOut(
            access_token=access.token,
            refresh_token=refresh.token,
            expires_in=access.expires_in,
        )
