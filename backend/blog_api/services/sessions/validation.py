"""Input rules for registration: username, email shape and password strength."""

from __future__ import annotations

import re

USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,30}$")
# Shape check only; deliverability is not verified.
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

PASSWORD_MIN = 8
PASSWORD_MAX = 128
PASSWORD_MIN_CLASSES = 3


def _char_classes(password: str) -> int:
    return sum(
        (
            any(c.islower() for c in password),
            any(c.isupper() for c in password),
            any(c.isdigit() for c in password),
            any(not c.isalnum() for c in password),
        )
    )


def validate_username(username: str) -> list[str]:
    if not USERNAME_RE.match(username or ""):
        return ["Must be 3-30 characters of letters, digits or underscore."]
    return []


def validate_email(email: str) -> list[str]:
    value = (email or "").strip()
    if len(value) > 254 or not EMAIL_RE.match(value):
        return ["Not a valid email address."]
    return []


def validate_password(password: str) -> list[str]:
    """
    Length 8-128 and at least three of: lowercase, uppercase, digit, symbol.

    :returns: Human-readable problems; empty when the password is acceptable.
    """
    password = password or ""
    problems: list[str] = []
    if not PASSWORD_MIN <= len(password) <= PASSWORD_MAX:
        problems.append(f"Must be between {PASSWORD_MIN} and {PASSWORD_MAX} characters.")
    if _char_classes(password) < PASSWORD_MIN_CLASSES:
        problems.append(
            "Must mix at least three of: lowercase, uppercase, digits, symbols."
        )
    return problems


def validate_registration(*, username: str, email: str, password: str) -> dict[str, list[str]]:
    """Collect per-field problems; an empty mapping means the input is valid."""
    errors = {
        "username": validate_username(username),
        "email": validate_email(email),
        "password": validate_password(password),
    }
    return {k: v for k, v in errors.items() if v}
