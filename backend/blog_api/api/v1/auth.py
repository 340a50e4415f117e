"""Session endpoints: register, login, refresh, logout, the current user and its sessions."""

from __future__ import annotations

from flask import Blueprint, Response, current_app, request

from blog_api.api.deps import (
    current_identity,
    json_response,
    require_auth,
    require_role,
    service_context,
    timing,
)
from blog_api.core.container import get_auth
from blog_api.core.extensions import limiter
from blog_api.schemas import (
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    SessionInfoSchema,
    SessionResponseSchema,
    UserPublicSchema,
)
from blog_api.services.identity.service import IdentityService
from blog_api.services.sessions.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
session_schema = SessionResponseSchema()
user_schema = UserPublicSchema()
sessions_schema = SessionInfoSchema(many=True)


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


@bp.post("/register")
@timing
def register():
    """Register a new ``user`` account and open its first session."""

    data = register_schema.load(request.get_json(silent=True) or {})
    service = get_auth().session_service(service_context())
    session = service.register(
        RegisterIn(
            username=data["username"],
            email=data["email"],
            password=data["password"],
            requested_role=data.get("role"),
        )
    )
    return json_response({"data": session_schema.dump(session)}, status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate by username or email and issue a token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    service = get_auth().session_service(service_context())
    session = service.login(LoginIn(login=data["login"], password=data["password"]))
    return json_response({"data": session_schema.dump(session)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token into a new token pair."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    service = get_auth().session_service(service_context())
    session = service.refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response({"data": session_schema.dump(session)})


@bp.post("/logout")
@timing
def logout():
    """Revoke the presented refresh session (or all of them)."""

    data = logout_schema.load(request.get_json(silent=True) or {})
    service = get_auth().session_service(service_context())
    service.logout(
        LogoutIn(refresh_token=data["refresh_token"], all_sessions=data["all_sessions"])
    )
    return Response(status=204)


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user profile."""

    user = IdentityService(ctx=service_context()).me()
    return json_response({"data": user_schema.dump(user)})


@bp.get("/sessions")
@require_auth
@timing
def list_sessions():
    """List the caller's active refresh sessions."""

    identity = current_identity()
    service = get_auth().session_service(service_context())
    return json_response({"data": sessions_schema.dump(service.list_sessions(identity.user_id))})


@bp.post("/users/<int:user_id>/revoke")
@require_role("admin")
@timing
def revoke_user_sessions(user_id: int):
    """Revoke every refresh session of ``user_id`` (admin only)."""

    service = get_auth().session_service(service_context())
    return json_response({"data": {"revoked": service.revoke_user_sessions(user_id)}})
