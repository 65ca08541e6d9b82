# qjob_tracker/users/errors.py
from fastapi import HTTPException, status


class UserAuthError(HTTPException):
    """Base exception class for signup and login failures.

    Inherits from FastAPI's HTTPException so every failure already knows the
    status code it is reported with.
    """

    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)


class DuplicateIdentityError(UserAuthError):
    """Raised when the email or username of a signup is already taken.

    The message names both fields on purpose; it never says which one collided.
    """

    def __init__(self, detail: str = "User with this email or username already exists"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidCredentialError(UserAuthError):
    """Raised when the provider rejects the API key or the service CRN at signup."""

    def __init__(self, reason: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=reason)


class InvalidCredentialsError(UserAuthError):
    """Raised on any login failure.

    Used for both unknown emails and wrong passwords so callers cannot tell
    the two apart.
    """

    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class UnexpectedAuthError(UserAuthError):
    """Raised when storage or transport fails in a way the caller cannot act on."""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
