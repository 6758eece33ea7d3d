"""Authentication dependency for the admin (read-only) API endpoints.

Behavior matrix:
  ADMIN_API_KEY set + valid token   → allow
  ADMIN_API_KEY set + wrong/missing → 401 Unauthorized
  ADMIN_API_KEY empty + DEBUG=true  → allow (local dev convenience)
  ADMIN_API_KEY empty + DEBUG=false → 403 Forbidden (locked in production)

Webhook endpoints are not covered here; they authenticate by signature.
"""

from __future__ import annotations

import hmac
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from consultations.config import Settings

log = logging.getLogger("consultations.auth")

_bearer_scheme = HTTPBearer(auto_error=False)


def admin_token_guard(config: Settings):
    """Build a FastAPI dependency checking the bearer token against ``config``."""

    async def require_admin_token(
        credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    ) -> None:
        key = config.admin_api_key

        if not key:
            if config.debug:
                return
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Admin API key not configured. Set ADMIN_API_KEY in .env.",
            )

        if credentials is None or not hmac.compare_digest(
            credentials.credentials.encode("utf-8"), key.encode("utf-8")
        ):
            log.warning("Rejected admin request with invalid token")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or missing admin token.",
                headers={"WWW-Authenticate": "Bearer"},
            )

    return require_admin_token
