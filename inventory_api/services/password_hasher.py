"""bcrypt password hashing."""

import bcrypt

DEFAULT_ROUNDS = 12


class PasswordHasher:
    """Salted, cost-tunable one-way password hashing.

    The cost factor is embedded in every hash, so ``verify`` works on hashes
    produced with any earlier ``rounds`` setting.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self.rounds = rounds
        # Same cost as real hashes, so a dummy verify takes as long as a real one
        self._dummy_hash = self.hash("unused-dummy-password")

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain-text password to hash

        Returns:
            Bcrypt hash string
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            password: Plain-text password to check
            password_hash: Bcrypt hash to verify against

        Returns:
            True if the password matches; False on mismatch or when the hash
            (or the password) is something bcrypt cannot process
        """
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, password: str) -> bool:
        """Spend one verification's worth of work against a throwaway hash.

        Used when no user matches, so an unknown email takes as long to reject
        as a wrong password. Always returns False.
        """
        self.verify(password, self._dummy_hash)
        return False
