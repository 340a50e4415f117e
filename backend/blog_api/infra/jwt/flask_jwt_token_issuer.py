# blog_api/infra/jwt/flask_jwt_token_issuer.py
from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast

import jwt as pyjwt
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException

from blog_api.services._shared.errors import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)
from blog_api.services._shared.ports.token_issuer import (
    REFRESH_TOKEN_BYTES,
    AccessClaims,
    TokenIssuer,
)


@dataclass(slots=True)
class FlaskJWTTokenIssuer(TokenIssuer):
    """
    Adapter for Flask-JWT-Extended.

    Access tokens carry ``id``, ``username`` and ``role`` next to the standard
    ``sub``/``iat``/``exp``/``type`` claims. Refresh tokens are opaque random
    strings and never pass through the JWT machinery.

    .. note::
       Requires an active Flask app context with proper JWT settings.

    :param access_ttl: Lifetime of every access token minted here.
    """

    access_ttl: timedelta

    def issue_access(self, *, user_id: int, username: str, role: str) -> str:
        # ``sub`` must be a string for PyJWT; the numeric id travels as ``id``.
        return cast(
            str,
            create_access_token(
                identity=str(user_id),
                additional_claims={"id": user_id, "username": username, "role": role},
                expires_delta=self.access_ttl,
            ),
        )

    def issue_refresh(self) -> str:
        return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)

    def verify_access(self, token: str) -> AccessClaims:
        try:
            data = cast(dict[str, Any], decode_token(token))
        except pyjwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except pyjwt.InvalidSignatureError as exc:
            raise InvalidSignatureError() from exc
        except (pyjwt.InvalidTokenError, JWTExtendedException) as exc:
            raise MalformedTokenError() from exc

        if data.get("type") != "access":
            raise MalformedTokenError("Not an access token")
        try:
            return AccessClaims(
                user_id=int(data["id"]),
                username=str(data["username"]),
                role=str(data["role"]),
                issued_at=datetime.fromtimestamp(int(data["iat"]), tz=UTC),
                expires_at=datetime.fromtimestamp(int(data["exp"]), tz=UTC),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedTokenError() from exc
