"""
bcrypt password hasher - Implements PasswordHasher protocol.

Hashes carry their own random salt and cost factor, so verify() works for
hashes created under an older cost setting.
"""

import bcrypt


class BcryptPasswordHasher:
    """Implements PasswordHasher protocol via bcrypt."""

    def __init__(self, rounds: int = 10) -> None:
        """
        Args:
            rounds: bcrypt work factor (>= 10 in production; tests may go lower)
        """
        self._rounds = rounds

    def hash(self, plain: str) -> str:
        return bcrypt.hashpw(plain.encode(), bcrypt.gensalt(rounds=self._rounds)).decode()

    def verify(self, plain: str, hashed: str) -> bool:
        """Constant-time check; malformed stored hashes never match."""
        try:
            return bcrypt.checkpw(plain.encode(), hashed.encode())
        except ValueError:
            return False
