"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from .common import TrimmedString


class _EmailLoadMixin:
    @post_load
    def normalize_email(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        data["email"] = data["email"].strip().lower()
        return data


class RegisterSchema(_EmailLoadMixin, Schema):
    """Input payload for account registration."""

    username = TrimmedString(
        required=True,
        validate=[
            validate.Length(min=3, max=30),
            validate.Regexp(
                r"^[A-Za-z0-9_]+$",
                error="Username can only contain letters, numbers and underscores.",
            ),
        ],
    )
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))


class LoginSchema(_EmailLoadMixin, Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    refresh_token = fields.String(
        required=True, data_key="refreshToken", validate=validate.Length(min=1)
    )


class LogoutSchema(Schema):
    """Logout body; the refresh token is optional and unknown keys are ignored."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(load_default=None, data_key="refreshToken")


class TokenPairSchema(Schema):
    """Response payload carrying the access/refresh pair."""

    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")
    expires_in = fields.Integer(required=True, data_key="expiresIn")


class PrincipalSchema(Schema):
    """Public view of the authenticated user."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.Email(required=True)
    role = fields.String(required=True)
    created_at = fields.DateTime(data_key="createdAt")


class RegistrationSchema(Schema):
    user = fields.Nested(PrincipalSchema, required=True)
    tokens = fields.Nested(TokenPairSchema, required=True)
