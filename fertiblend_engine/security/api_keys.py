from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Depends, Header, HTTPException
from starlette.status import HTTP_401_UNAUTHORIZED

from ..settings import Settings, get_settings


def _constant_time_equals(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode(), b.encode())


def _provided_key(x_api_key: Optional[str], authorization: Optional[str]) -> Optional[str]:
    if x_api_key:
        return x_api_key.strip()
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


def get_api_key(
    settings: Settings = Depends(get_settings),
    x_api_key: Optional[str] = Header(default=None, alias="x-api-key"),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> str:
    if not settings.api_key:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing API key")

    provided = _provided_key(x_api_key, authorization)
    if provided and _constant_time_equals(provided, settings.api_key):
        return provided

    raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid API key")
