"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import (
    Schema,
    ValidationError,
    fields,
    post_load,
    validate,
    validates_schema,
)


class RegisterSchema(Schema):
    """
    Input payload for account registration.

    Only presence and coarse length are checked here; the session service
    applies the username, email and password rules.
    """

    username = fields.String(required=True, validate=validate.Length(max=64))
    email = fields.String(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(max=1024))
    role = fields.String(load_default=None)


class LoginSchema(Schema):
    """
    Input payload for authenticating a user.

    ``login`` accepts a username or an email; ``username`` is kept as an alias.
    """

    login = fields.String(load_default=None)
    username = fields.String(load_default=None)
    password = fields.String(required=True, validate=validate.Length(min=1, max=1024))

    @validates_schema
    def _require_identity(self, data: dict[str, Any], **_: Any) -> None:
        if not (data.get("login") or data.get("username")):
            raise ValidationError("Username or email is required.", field_name="login")

    @post_load
    def _merge_identity(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        data["login"] = data.get("login") or data.pop("username", None)
        data.pop("username", None)
        return data


class RefreshSchema(Schema):
    """Input payload carrying an opaque refresh token."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1, max=512))


class LogoutSchema(RefreshSchema):
    """Input payload for logout; ``all_sessions`` revokes every session of the owner."""

    all_sessions = fields.Boolean(load_default=False)


class UserPublicSchema(Schema):
    """Public projection of a user."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.String(required=True)
    role = fields.String(required=True)
    created_at = fields.DateTime(allow_none=True)


class SessionResponseSchema(Schema):
    """Response payload of register/login/refresh."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(required=True)
    expires_in = fields.Integer(required=True)
    user = fields.Nested(UserPublicSchema, required=True)


class SessionInfoSchema(Schema):
    """An active refresh session (timestamps only)."""

    issued_at = fields.DateTime(required=True)
    expires_at = fields.DateTime(required=True)
