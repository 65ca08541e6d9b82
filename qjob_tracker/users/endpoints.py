# qjob_tracker/users/endpoints.py
import logging
from fastapi import APIRouter, Depends, status
from typing import Annotated

from .models import SignupRequest, SignupResponse, LoginRequest, LoginResponse
from .password_hasher import BcryptPasswordHasher, PasswordHasherProtocol
from .service import AuthService
from .sqlite_user_store import get_sqlite_user_store
from .storage_interfaces import AbstractUserStore
from ..provider.validator import AbstractCredentialValidator, get_credential_validator

logger = logging.getLogger(__name__)

users_router = APIRouter(prefix="/api", tags=["Authentication"])


def get_password_hasher_dependency() -> PasswordHasherProtocol:
    """Returns the default bcrypt password hasher."""
    return BcryptPasswordHasher()


async def get_auth_service(
    user_store: Annotated[AbstractUserStore, Depends(get_sqlite_user_store)],
    credential_validator: Annotated[AbstractCredentialValidator, Depends(get_credential_validator)],
    password_hasher: Annotated[PasswordHasherProtocol, Depends(get_password_hasher_dependency)],
) -> AuthService:
    """Factory function to create AuthService with injected dependencies."""
    return AuthService(
        user_store=user_store,
        credential_validator=credential_validator,
        password_hasher=password_hasher,
    )


@users_router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account after validating provider credentials",
)
async def signup_endpoint(
    signup_request: SignupRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """
    Register a user. Returns 400 for a taken email/username or rejected
    provider credentials.
    """
    logger.info(f"API: Received signup request for username '{signup_request.username}'.")
    identity = await service.signup(
        username=signup_request.username,
        email=signup_request.email,
        password=signup_request.password,
        api_key=signup_request.api,
        service_crn=signup_request.crn,
    )
    return SignupResponse(user_id=identity.id)


@users_router.post(
    "/login",
    response_model=LoginResponse,
    summary="Check an email and password",
)
async def login_endpoint(
    login_request: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Returns the user's id, username and email. Any failure is a generic 401."""
    identity = await service.login(email=login_request.email, password=login_request.password)
    return LoginResponse(user_id=identity.id, username=identity.username, email=identity.email)
