"""Error types shared by the identity provider, the route guard and the API.

Identity errors carry a provider-style code (``auth/...``). Only a fixed set of
codes gets bespoke text; anything else falls back to a generic message.
"""

import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."

# code -> (message, http status)
AUTH_ERROR_MESSAGES = {
    "auth/invalid-credential": ("Invalid email or password. Please try again.", 401),
    "auth/user-not-found": ("No account found with this email.", 404),
    "auth/too-many-requests": ("Too many attempts. Please try again later.", 429),
    "auth/email-already-in-use": ("This email is already in use.", 409),
    "auth/weak-password": ("Password is too weak.", 400),
    "auth/invalid-email": ("Invalid email format.", 400),
    "auth/wrong-password": ("Current password is incorrect.", 400),
    "auth/requires-recent-login": ("Please log in again before changing your password.", 403),
}


def friendly_message(code: Optional[str]) -> str:
    """Return the user-facing text for a provider error code."""
    if code in AUTH_ERROR_MESSAGES:
        return AUTH_ERROR_MESSAGES[code][0]
    return GENERIC_ERROR_MESSAGE


class AuthError(Exception):
    """Raised by the identity provider with a provider error code."""

    def __init__(self, code: str, reason: Optional[str] = None):
        super().__init__(code)
        self.code = code
        self.reason = reason

    @property
    def message(self) -> str:
        return friendly_message(self.code)

    @property
    def status_code(self) -> int:
        return AUTH_ERROR_MESSAGES.get(self.code, (None, 500))[1]


class RedirectRequired(Exception):
    """Raised by the route guard when navigation must go elsewhere."""

    def __init__(self, location: str, detail: str):
        super().__init__(detail)
        self.location = location
        self.detail = detail

    @property
    def status_code(self) -> int:
        # Unauthenticated -> login, authenticated with the wrong role -> home
        return 401 if self.location == "/login" else 403


async def auth_error_handler(request: Request, exc: AuthError):
    content = {"detail": exc.message, "code": exc.code}
    if exc.reason:
        content["reason"] = exc.reason
    return JSONResponse(status_code=exc.status_code, content=content)


async def redirect_required_handler(request: Request, exc: RedirectRequired):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "redirect_to": exc.location},
        headers={"Location": exc.location},
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(status_code=500, content={"detail": GENERIC_ERROR_MESSAGE})
