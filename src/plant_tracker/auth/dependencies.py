"""FastAPI auth dependencies.

These are used as Depends() in route handlers (or at include_router
level) to extract and validate the current identity from the request.

The token service and password hasher live on app.state, built once in
create_app() from the Settings object, and are handed out from here.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, HTTPException, Request

from plant_tracker.auth.jwt import TokenService
from plant_tracker.auth.password import PasswordHasher
from plant_tracker.errors import TokenInvalid

logger = structlog.get_logger()


class CurrentIdentity:
    """The authenticated caller, as proven by a validated token.

    Plant queries are scoped by this email. Nothing in a request body
    can override it.
    """

    def __init__(self, email: str):
        self.email = email

    def __repr__(self) -> str:
        return f"CurrentIdentity(email={self.email!r})"


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentIdentity:
    """Resolve the caller from the Bearer token (required — 401 if absent).

    Missing header, wrong scheme, and any token the TokenService rejects
    all produce the same 401 so callers can't tell which check failed.
    """
    if not authorization:
        raise _unauthorized("Authentication required")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Authentication required")

    try:
        email = tokens.validate(token.strip())
    except TokenInvalid as e:
        logger.info("auth.token_rejected", path=request.url.path)
        raise _unauthorized(e.message)

    identity = CurrentIdentity(email=email)
    request.state.identity = identity
    return identity
