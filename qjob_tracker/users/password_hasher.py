# qjob_tracker/users/password_hasher.py
import bcrypt
from abc import ABC, abstractmethod
from typing import Optional

from ..settings import settings


class PasswordHasherProtocol(ABC):
    """Protocol defining the interface for password hashing operations."""

    @abstractmethod
    def hash_password(self, password: str) -> str:
        """Hash a plaintext password with a fresh salt."""
        pass

    @abstractmethod
    def verify_password(self, password: str, password_hash: str) -> bool:
        """Check a plaintext password against a stored hash."""
        pass


# bcrypt reads at most 72 bytes of a password. Hash and verify both cut
# longer input at that limit.
BCRYPT_MAX_PASSWORD_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode('utf-8')[:BCRYPT_MAX_PASSWORD_BYTES]


class BcryptPasswordHasher(PasswordHasherProtocol):
    """Default implementation using bcrypt with a per-call salt."""

    def __init__(self, rounds: Optional[int] = None):
        self.rounds = rounds or settings.password_hash_rounds

    def hash_password(self, password: str) -> str:
        """
        Hash the password with a newly generated salt.

        The salt and cost factor are embedded in the returned string, so two
        hashes of the same password never compare equal.
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_password_bytes(password), salt).decode('utf-8')

    def verify_password(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_password_bytes(password), password_hash.encode('utf-8'))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False
