"""
app/dependencies/access_control.py — Bearer Token Gate
=======================================================

Mutating endpoints require a single shared secret:

    Authorization: Bearer <token>

Outcomes:
  - Header missing, wrong scheme, or empty token → 401 (unauthenticated)
  - Token present but not the configured secret  → 403 (forbidden)
  - Token matches                                 → request proceeds
  - No secret configured on the server            → 503 (writes disabled)

The secret is handed to the gate once, when the app is built, and the gate
is attached as a router-level dependency::

    gate = BearerGate(config["security"]["api_token"])
    app.include_router(manage.router, prefix="/api", dependencies=[Depends(gate)])
"""

import logging
import secrets
from typing import Optional

from fastapi import HTTPException, Request

from db.errors import PortfolioError

logger = logging.getLogger(__name__)

SCHEME = "bearer"


class AuthError(PortfolioError):
    """Missing (401) or wrong (403) bearer token."""

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.status_code = status_code

    @property
    def headers(self) -> Optional[dict]:
        if self.status_code == 401:
            return {"WWW-Authenticate": "Bearer"}
        return None


# ── Token extraction ──────────────────────────────────────────────────────────

def _extract_raw_token(request: Request) -> Optional[str]:
    """
    Pull the raw token from ``Authorization: Bearer <token>``, or None.

    The scheme name is case-insensitive; the token is taken as is.
    """
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() == SCHEME and token:
        return token
    return None


# ── Dependency ────────────────────────────────────────────────────────────────

class BearerGate:
    """
    Callable FastAPI dependency comparing the bearer token with one secret.

    Parameters
    ----------
    api_token:
        The configured secret. Empty or None disables all gated routes (503).
    """

    def __init__(self, api_token: Optional[str]) -> None:
        self._secret = api_token.encode() if api_token else None
        if self._secret is None:
            logger.warning(
                "No API token configured — mutating endpoints will answer 503. "
                "Set PORTFOLIO_API_TOKEN or security.api_token."
            )

    @property
    def enabled(self) -> bool:
        return self._secret is not None

    def __call__(self, request: Request) -> None:
        if self._secret is None:
            raise HTTPException(503, "Write access is disabled: no API token configured")

        raw_token = _extract_raw_token(request)
        if not raw_token:
            logger.warning("Rejected %s %s: missing bearer token",
                           request.method, request.url.path)
            raise AuthError(
                "Authentication required: provide 'Authorization: Bearer <token>'.",
                status_code=401,
            )

        if not secrets.compare_digest(raw_token.encode(), self._secret):
            logger.warning("Rejected %s %s: invalid bearer token",
                           request.method, request.url.path)
            raise AuthError("Access forbidden: token is invalid.", status_code=403)
