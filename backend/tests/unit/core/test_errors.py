"""Service error to HTTP problem mapping."""

from __future__ import annotations

import pytest

from blog_api.core.errors import translate_service_error
from blog_api.services._shared import errors as svc


@pytest.mark.parametrize(
    ("exc", "status", "code"),
    [
        (svc.ValidationError({"email": ["bad"]}), 422, "validation_error"),
        (svc.InvalidCredentialsError(), 401, "invalid_credentials"),
        (svc.InvalidRefreshTokenError(), 401, "invalid_refresh_token"),
        (svc.TokenReusedError(), 401, "invalid_refresh_token"),
        (svc.TokenExpiredError(), 401, "unauthorized"),
        (svc.AuthorizationError(), 403, "forbidden"),
        (svc.DuplicateIdentityError(), 409, "duplicate_identity"),
        (svc.ConflictError("RefreshToken"), 409, "conflict"),
        (svc.NotFoundError("Post", 1), 404, "not_found"),
        (svc.StoreError(), 503, "service_unavailable"),
    ],
)
def test_translate_service_error(exc, status, code):
    api = translate_service_error(exc)
    assert (api.status_code, api.code) == (status, code)


def test_reuse_and_invalid_refresh_share_one_message():
    reused = translate_service_error(svc.TokenReusedError())
    invalid = translate_service_error(svc.InvalidRefreshTokenError())
    assert reused.message == invalid.message


def test_validation_details_are_carried():
    api = translate_service_error(svc.ValidationError({"password": ["too short"]}))
    assert api.details == {"errors": {"password": ["too short"]}}
