"""JWT token creation and verification.

JWT (JSON Web Token) provides stateless authentication: validity is
decided by signature and expiry alone, there is no session table and
no revocation list. Logging out is the client throwing its token away.

The token carries the user's email as its subject.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from plant_tracker.config import Settings
from plant_tracker.errors import TokenInvalid


class TokenService:
    """Issues and validates signed, time-limited bearer tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_minutes: int = 24 * 60):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl_minutes = ttl_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl_minutes=settings.token_ttl_minutes,
        )

    def issue(self, subject: str, expires_minutes: Optional[int] = None) -> str:
        """Create a JWT for the given subject (the user's email)."""
        now = datetime.now(timezone.utc)
        expires = now + timedelta(minutes=expires_minutes or self.ttl_minutes)
        payload = {
            "sub": subject,
            "exp": expires,
            "iat": now,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def validate(self, token: str) -> str:
        """Verify a JWT and return its subject.

        Raises TokenInvalid on any failure — bad signature, malformed
        structure, expiry, or a missing subject all look the same.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.InvalidTokenError as e:
            # ExpiredSignatureError is a subclass of InvalidTokenError
            raise TokenInvalid() from e

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise TokenInvalid()
        return subject
