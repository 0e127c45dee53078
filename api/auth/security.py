"""
Admin token verification for write endpoints.

Tokens are issued elsewhere; this service only checks the signature, expiry
and the `role` claim.
"""

from __future__ import annotations

from typing import Any

import jwt

from core.settings import env_str


class AuthSecurityError(RuntimeError):
    pass


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return env_str("JWT_SECRET", "dev-change-this-secret")


def jwt_algorithm() -> str:
    return env_str("JWT_ALG", "HS256")


def decode_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        return jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid or expired token.") from exc


def has_role(payload: dict[str, Any], allowed: set[str]) -> bool:
    role = str(payload.get("role") or "").strip().lower()
    return role in allowed
