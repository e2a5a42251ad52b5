from __future__ import annotations

import hmac

from fastapi import Header, HTTPException, status
from starlette.datastructures import MutableHeaders

from agentflow_bridge.config import settings

HYGIENE_HEADERS = {
    "Referrer-Policy": "no-referrer",
    "X-Content-Type-Options": "nosniff",
    "Cache-Control": "no-store",
}


def apply_hygiene_headers(headers: MutableHeaders) -> None:
    for name, value in HYGIENE_HEADERS.items():
        headers[name] = value


def require_admin_token(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> None:
    expected = settings.BRIDGE_ADMIN_TOKEN
    if not expected:
        return
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Bearer authorization header",
        )
    token = authorization[7:].strip()
    if not hmac.compare_digest(token, expected):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin token",
        )
