"""
FastAPI dependencies: backends and the session guard.
"""
from typing import Optional

import httpx
from fastapi import Request, HTTPException

from .config import settings
from .exceptions import AuthenticationError
from .providers.database import get_db
from .providers.storage import get_bucket
from .services.auth_service import create_token, decode_token, needs_refresh

__all__ = ["get_db", "get_bucket", "get_http_client", "close_http_client", "require_session"]

# Shared for the app's lifetime; streamed downloads outlive the request handler.
_http_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    """Get the outbound HTTP client."""
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(timeout=settings.HTTP_CLIENT_TIMEOUT, follow_redirects=True)
    return _http_client


async def close_http_client():
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


async def require_session(request: Request) -> dict:
    """Dependency to require a community session token."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise HTTPException(401, "Missing authorization header")

    try:
        session = decode_token(auth_header[7:])
    except AuthenticationError as e:
        raise HTTPException(401, e.message)

    # Sliding expiration
    if needs_refresh(session):
        request.state.new_token = create_token(session["uid"], session.get("community", ""), session.get("role", "community_admin"))

    return session
