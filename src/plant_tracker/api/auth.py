"""Auth API — registration and login.

Routes for user authentication:
- POST /auth/register → create a new user account, returns a JWT
- POST /auth/login → email/password → JWT

These are mounted without the auth dependency; everything else needs
the token they hand out.
"""

import uuid
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from plant_tracker.auth.dependencies import get_password_hasher, get_token_service
from plant_tracker.auth.jwt import TokenService
from plant_tracker.auth.password import PasswordHasher
from plant_tracker.db.engine import get_db
from plant_tracker.services.auth_service import AuthService

logger = structlog.get_logger()

router = APIRouter(prefix="/auth")


# ─── Schemas ─────────────────────────────────────────────


class RegisterRequest(BaseModel):
    email: EmailStr = Field(examples=["user@example.com"])
    username: str = Field(min_length=3, max_length=20, examples=["user123"])
    password: str = Field(min_length=8, max_length=50)

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=50)


class AuthResponse(BaseModel):
    jwt: str
    message: str
    user_id: Optional[uuid.UUID] = Field(default=None, serialization_alias="userId")


def _svc(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(db, hasher, tokens)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    response: Response,
    svc: AuthService = Depends(_svc),
):
    """Create a new user account and return a token for it."""
    logger.info("auth.register_attempt", email=body.email)
    result = await svc.register(
        email=body.email, username=body.username, password=body.password
    )
    logger.info("auth.registered", email=body.email)

    response.headers["Location"] = f"/api/users/{result.user_id}"
    return AuthResponse(jwt=result.jwt, message=result.message, user_id=result.user_id)


# ─── Login ───────────────────────────────────────────────


@router.post(
    "/login",
    response_model=AuthResponse,
    response_model_exclude_none=True,
)
async def login(body: LoginRequest, svc: AuthService = Depends(_svc)):
    """Login with email and password → JWT."""
    logger.info("auth.login_attempt", email=body.email)
    result = await svc.login(email=body.email, password=body.password)
    logger.info("auth.login_succeeded", email=body.email)
    return AuthResponse(jwt=result.jwt, message=result.message)
