# qjob_tracker/users/storage_interfaces.py
from abc import ABC, abstractmethod
from typing import Optional
from .models import UserCreate, UserInDB


class AbstractUserStore(ABC):
    """
    Abstract base class defining the interface for user directory storage.

    Implementations must enforce uniqueness of username and email themselves
    and report a violation from create_user as DuplicateIdentityError. The
    service-level existence check only avoids wasted work; it is not what
    keeps two concurrent signups from both succeeding.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the storage backend and prepare it for operations."""
        pass

    @abstractmethod
    async def teardown(self) -> None:
        """Clean up resources and properly close the storage backend."""
        pass

    @abstractmethod
    async def find_by_email_or_username(self, email: str, username: str) -> Optional[UserInDB]:
        """Return any user whose email or username matches, or None."""
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        """Retrieve a user by email."""
        pass

    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> Optional[UserInDB]:
        """Retrieve a user by generated id."""
        pass

    @abstractmethod
    async def create_user(self, user_create: UserCreate) -> UserInDB:
        """
        Insert a new user and return the stored record.

        Raises:
            DuplicateIdentityError: If the email or username is already taken.
        """
        pass
