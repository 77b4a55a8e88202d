from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from pipeline_app.config import get_settings
from pipeline_app.models.schemas import Role


class MissingCredentialsError(ValueError):
    """Raised when a login attempt lacks a username or a password."""


class InvalidCredentialsError(ValueError):
    """Raised when a username/password pair does not match any known account."""


@dataclass(frozen=True)
class Credential:
    password: str
    role: Role


# Demo accounts compared in plain text; not a security mechanism.
DEFAULT_CREDENTIALS: Mapping[str, Credential] = {
    "admin": Credential(password="admin", role="admin"),
    "test": Credential(password="test", role="user"),
}


def is_blank(value: Any) -> bool:
    """True for values a JSON client means as "not given": null, false, 0, NaN and ""."""

    if value is None or isinstance(value, bool):
        return value is not True
    if isinstance(value, (int, float)):
        return value == 0 or value != value
    if isinstance(value, str):
        return value == ""
    return False


def authenticate(
    credentials: Mapping[str, Credential],
    username: Any,
    password: Any,
) -> Credential:
    """Match a username/password pair against the credential table.

    A missing or blank field is reported before any lookup happens. Unknown
    users, wrong passwords and non-string values raise the same error.
    """

    if is_blank(username) or is_blank(password):
        raise MissingCredentialsError("Username and password required")

    if not isinstance(username, str) or not isinstance(password, str):
        raise InvalidCredentialsError("Invalid credentials")

    credential = credentials.get(username)
    if credential is None or credential.password != password:
        raise InvalidCredentialsError("Invalid credentials")
    return credential


def create_session_token(username: str, role: str) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": username,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.jwt_exp_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_session_token(token: str) -> dict[str, Any]:
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
