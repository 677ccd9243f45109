"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from ..services.routing.errors import Unauthorized
from ..services.routing.service import authenticate


async def require_bearer_token(request: Request) -> str:
    """Reject the request with 401 before its body is validated unless it carries a bearer token."""
    try:
        return authenticate(request.headers.get("Authorization"))
    except Unauthorized as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.detail,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
