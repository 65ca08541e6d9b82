# qjob_tracker/users/__init__.py
"""
User directory and authentication.

Signup validates provider credentials before storing a user; login checks an
email/password pair. Neither creates a realtime session.
"""

from .models import (
    SignupRequest,
    SignupResponse,
    LoginRequest,
    LoginResponse,
    UserIdentity,
    UserCreate,
    UserInDB
)

from .errors import (
    UserAuthError,
    DuplicateIdentityError,
    InvalidCredentialError,
    InvalidCredentialsError,
    UnexpectedAuthError
)

from .password_hasher import PasswordHasherProtocol, BcryptPasswordHasher
from .storage_interfaces import AbstractUserStore
from .sqlite_user_store import SQLiteUserStore, get_sqlite_user_store
from .service import AuthService
from .endpoints import users_router

__all__ = [
    "SignupRequest",
    "SignupResponse",
    "LoginRequest",
    "LoginResponse",
    "UserIdentity",
    "UserCreate",
    "UserInDB",

    "UserAuthError",
    "DuplicateIdentityError",
    "InvalidCredentialError",
    "InvalidCredentialsError",
    "UnexpectedAuthError",

    "PasswordHasherProtocol",
    "BcryptPasswordHasher",
    "AbstractUserStore",
    "SQLiteUserStore",
    "get_sqlite_user_store",
    "AuthService",

    "users_router"
]
