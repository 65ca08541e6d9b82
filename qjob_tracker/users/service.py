# qjob_tracker/users/service.py
import logging
from typing import Optional

from starlette.concurrency import run_in_threadpool

from .errors import (
    UserAuthError,
    DuplicateIdentityError,
    InvalidCredentialError,
    InvalidCredentialsError,
    UnexpectedAuthError,
)
from .models import UserCreate, UserIdentity
from .password_hasher import PasswordHasherProtocol
from .storage_interfaces import AbstractUserStore
from ..provider.validator import AbstractCredentialValidator

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service layer for signup and login.

    Talks only to the user store, the credential validator and the password
    hasher. It does not create realtime sessions or issue tokens; binding a
    connection to a user happens separately through the realtime `auth` event.
    """

    def __init__(
        self,
        user_store: AbstractUserStore,
        credential_validator: AbstractCredentialValidator,
        password_hasher: PasswordHasherProtocol,
    ):
        self.user_store = user_store
        self.credential_validator = credential_validator
        self.password_hasher = password_hasher
        self._dummy_password_hash: Optional[str] = None

    async def _get_dummy_password_hash(self) -> str:
        """Hash compared against when no account matches, so both login failures cost one bcrypt check."""
        if self._dummy_password_hash is None:
            self._dummy_password_hash = await run_in_threadpool(
                self.password_hasher.hash_password, "qjob-tracker-dummy-password"
            )
        return self._dummy_password_hash

    async def signup(
        self,
        username: str,
        email: str,
        password: str,
        api_key: str,
        service_crn: str,
    ) -> UserIdentity:
        """
        Create a user after checking uniqueness and provider credentials.

        The existence check runs before the provider is contacted so a doomed
        signup costs no remote calls. The store's own uniqueness constraint
        still decides the outcome when two signups race.

        Raises:
            DuplicateIdentityError: Email or username already taken.
            InvalidCredentialError: Provider rejected the API key or CRN.
            UnexpectedAuthError: Any other failure.
        """
        logger.info(f"Service: Signup attempt for username '{username}'.")
        try:
            existing_user = await self.user_store.find_by_email_or_username(email, username)
            if existing_user:
                logger.info(f"Service: Signup for username '{username}' rejected, identity already exists.")
                raise DuplicateIdentityError()

            validation_result = await self.credential_validator.validate(api_key, service_crn)
            if not validation_result.valid:
                logger.info(
                    f"Service: Signup for username '{username}' rejected by provider "
                    f"({validation_result.outcome.value})."
                )
                raise InvalidCredentialError(validation_result.reason)

            password_hash = await run_in_threadpool(self.password_hasher.hash_password, password)
            created_user = await self.user_store.create_user(
                UserCreate(
                    username=username,
                    email=email,
                    password_hash=password_hash,
                    service_crn=service_crn,
                    api_key=api_key,
                )
            )
        except UserAuthError:
            raise
        except Exception as e:
            logger.error(f"Service: Unexpected error during signup for '{username}': {e}", exc_info=True)
            raise UnexpectedAuthError() from e

        logger.info(f"Service: Signup succeeded for username '{username}' (id '{created_user.id}').")
        return created_user.to_identity()

    async def login(self, email: str, password: str) -> UserIdentity:
        """
        Verify an email/password pair.

        Unknown email and wrong password raise the same InvalidCredentialsError.
        """
        try:
            user = await self.user_store.get_user_by_email(email)
            if not user:
                dummy_hash = await self._get_dummy_password_hash()
                await run_in_threadpool(self.password_hasher.verify_password, password, dummy_hash)
                logger.info("Service: Login failed, no matching account.")
                raise InvalidCredentialsError()

            password_matches = await run_in_threadpool(
                self.password_hasher.verify_password, password, user.password_hash
            )
            if not password_matches:
                logger.info(f"Service: Login failed for user id '{user.id}', password mismatch.")
                raise InvalidCredentialsError()
        except UserAuthError:
            raise
        except Exception as e:
            logger.error(f"Service: Unexpected error during login: {e}", exc_info=True)
            raise UnexpectedAuthError() from e

        logger.info(f"Service: Login succeeded for user id '{user.id}'.")
        return user.to_identity()
