"""Password hashing.

Uses bcrypt for secure password hashing. bcrypt automatically handles
salting, so hashing the same password twice yields different strings;
verification reads the salt and cost back out of the stored hash.
"""

import bcrypt

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """bcrypt hashing with a configurable work factor."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password with a fresh random salt.

        Produces hashes starting with "$2b$". Passwords are truncated
        to 72 bytes (bcrypt's limit).
        """
        pw_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against its hash.

        A malformed or empty hash fails closed (returns False) rather
        than raising, so callers can't tell it apart from a wrong password.
        """
        if not password_hash:
            return False
        try:
            pw_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
            hash_bytes = password_hash.encode("utf-8")
            return bcrypt.checkpw(pw_bytes, hash_bytes)
        except (ValueError, TypeError):
            return False
