"""
SSO token verification over HTTP.

Used endpoint:
- POST {SSO_VERIFY_URL}  {"token": ..., "app_code": ...}
  -> {"success": true, "data": {"user": {...}, "role": "..."}}
"""

from __future__ import annotations

from typing import Any

import httpx

from core.settings import env_float, env_str

DEFAULT_SSO_VERIFY_URL = "http://sso:8080/api/auth/verify"
DEFAULT_APP_CODE = "pricelab"


class SsoError(RuntimeError):
    pass


class SsoForbidden(SsoError):
    pass


def sso_verify_url() -> str:
    return env_str("SSO_VERIFY_URL", DEFAULT_SSO_VERIFY_URL)


def sso_app_code() -> str:
    return env_str("SSO_APP_CODE", DEFAULT_APP_CODE)


async def verify_token(token: str, *, timeout_s: float | None = None) -> dict[str, Any]:
    """
    Return `{id, email, name, role}` for a valid token.

    Raises SsoForbidden when the user has no role for this app, SsoError otherwise.
    """
    timeout = timeout_s if timeout_s is not None else env_float("SSO_TIMEOUT_S", 5.0)
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(sso_verify_url(), json={"token": token, "app_code": sso_app_code()})
    except httpx.HTTPError as exc:
        raise SsoError("SSO backend unavailable.") from exc

    if resp.status_code == 403:
        raise SsoForbidden(f"No access to {sso_app_code()}.")
    if resp.status_code != 200:
        raise SsoError(f"SSO verify failed: {resp.status_code} {resp.text[:200]}")

    body: dict[str, Any] = resp.json()
    if not body.get("success"):
        raise SsoError("Invalid or expired token.")

    data = body.get("data") or {}
    role = data.get("role")
    if not role:
        raise SsoForbidden(f"No access to {sso_app_code()}.")

    user = data.get("user") or {}
    return {
        "id": user.get("id"),
        "email": user.get("email"),
        "name": user.get("name"),
        "role": str(role),
    }
