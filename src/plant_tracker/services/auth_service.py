"""Auth service — registration and login.

Each call stands alone; there is no session state between requests.
register() is not idempotent (the second call with the same email
fails), login() has no side effects beyond minting a token.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from plant_tracker.auth.jwt import TokenService
from plant_tracker.auth.password import PasswordHasher
from plant_tracker.db.models import DEFAULT_ROLE, User
from plant_tracker.errors import EmailExists, InvalidCredentials, UsernameExists
from plant_tracker.services.user_service import UserService

logger = structlog.get_logger()

REGISTERED_MESSAGE = "User registered successfully"
LOGIN_MESSAGE = "Login successful"


@dataclass
class AuthResult:
    jwt: str
    message: str
    user_id: Optional[uuid.UUID] = None


class AuthService:
    """Business logic for account creation and credential checks."""

    def __init__(
        self,
        db: AsyncSession,
        hasher: PasswordHasher,
        tokens: TokenService,
    ):
        self.db = db
        self.hasher = hasher
        self.tokens = tokens
        self.users = UserService(db)

    async def register(self, email: str, username: str, password: str) -> AuthResult:
        """Create an account and log it straight in.

        The email pre-check gives a clean error in the common case. Two
        racing registrations both pass it, so the unique constraints
        decide, and the loser still gets EmailExists/UsernameExists.
        """
        if await self.users.email_exists(email):
            raise EmailExists(email)
        if await self.users.username_exists(username):
            raise UsernameExists(username)

        user = User(
            email=email,
            username=username,
            password_hash=self.hasher.hash(password),
            role=DEFAULT_ROLE,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            conflict = await self._conflict_for(email, username)
            if conflict is None:
                raise
            raise conflict from e

        logger.info("auth.user_created", user_id=str(user.id))
        return AuthResult(
            jwt=self.tokens.issue(user.email),
            message=REGISTERED_MESSAGE,
            user_id=user.id,
        )

    async def login(self, email: str, password: str) -> AuthResult:
        """Check credentials and mint a token.

        Unknown email and wrong password raise the same error.
        """
        user = await self.users.find_by_email(email)
        if user is None or not self.hasher.verify(password, user.password_hash):
            raise InvalidCredentials()

        return AuthResult(jwt=self.tokens.issue(user.email), message=LOGIN_MESSAGE)

    async def _conflict_for(self, email: str, username: str) -> Optional[Exception]:
        if await self.users.email_exists(email):
            return EmailExists(email)
        if await self.users.username_exists(username):
            return UsernameExists(username)
        return None
