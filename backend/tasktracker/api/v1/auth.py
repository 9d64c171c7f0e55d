"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from tasktracker.api.deps import (
    current_principal,
    json_response,
    no_content,
    require_auth,
    session_service,
    timing,
)
from tasktracker.core.extensions import limiter
from tasktracker.schemas import (
    LoginSchema,
    LogoutSchema,
    PrincipalSchema,
    RefreshSchema,
    RegisterSchema,
    RegistrationSchema,
    TokenPairSchema,
)
from tasktracker.services.auth import LoginIn, LogoutIn, RefreshIn, RegisterIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
registration_schema = RegistrationSchema()
token_schema = TokenPairSchema()
principal_schema = PrincipalSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "10 per minute"))


@bp.post("/register")
@timing
def register():
    """Register a new user and return it with its first token pair."""

    payload = register_schema.load(request.get_json(silent=True) or {})
    result = session_service().register(RegisterIn(**payload))
    return json_response({"data": registration_schema.dump(result)}, status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and issue a token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    pair = session_service().login(LoginIn(**data))
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token into a new pair. Each refresh token works once."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    pair = session_service().refresh(RefreshIn(**data))
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@timing
def logout():
    """Revoke the refresh token in the body, if any. Always 204."""

    data = logout_schema.load(request.get_json(silent=True) or {})
    session_service().logout(LogoutIn(**data))
    return no_content()


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user profile."""

    return json_response({"data": principal_schema.dump(current_principal())})
