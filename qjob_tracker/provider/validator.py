# qjob_tracker/provider/validator.py
import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

import httpx

from .models import CredentialValidationResult
from ..settings import settings

logger = logging.getLogger(__name__)


class AbstractCredentialValidator(ABC):
    """Interface for checking a user's provider credentials before signup."""

    @abstractmethod
    async def validate(self, api_key: str, service_crn: str) -> CredentialValidationResult:
        """Check that the API key is accepted and authorizes the given service CRN."""
        pass


class ProviderCredentialValidator(AbstractCredentialValidator):
    """
    Validates credentials with two sequential calls to the provider.

    The API key is first exchanged for a bearer token at the identity
    endpoint. The token is then used to list jobs scoped by the service CRN
    header. Both calls are made exactly once; there is no retry.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token_url: Optional[str] = None,
        jobs_url: Optional[str] = None,
        service_crn_header: Optional[str] = None,
        grant_type: Optional[str] = None,
    ):
        self.client = http_client
        self.token_url = token_url or settings.provider_token_url
        self.jobs_url = jobs_url or settings.provider_jobs_url
        self.service_crn_header = service_crn_header or settings.provider_service_crn_header
        self.grant_type = grant_type or settings.provider_api_key_grant_type

    async def _exchange_api_key_for_token(self, api_key: str) -> Optional[str]:
        """
        Trade the API key for a bearer token.

        Returns None when the provider rejects the key, the call fails in
        transport, or the response carries no access_token.
        """
        try:
            response = await self.client.post(
                self.token_url,
                data={"grant_type": self.grant_type, "apikey": api_key},
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Accept": "application/json",
                },
            )
            response.raise_for_status()
            token_payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Provider token exchange rejected with status {e.response.status_code}.")
            return None
        except httpx.HTTPError as e:
            logger.warning(f"Provider token exchange failed in transport: {type(e).__name__}: {e}")
            return None
        except UnicodeEncodeError:
            logger.warning("Provider token exchange request could not be encoded.")
            return None
        except ValueError:
            logger.warning("Provider token exchange returned a non-JSON body.")
            return None

        access_token = token_payload.get("access_token") if isinstance(token_payload, dict) else None
        if not access_token:
            logger.warning("Provider token exchange response did not contain an access_token.")
            return None
        return access_token

    async def _probe_service_scope(self, bearer_token: str, service_crn: str) -> bool:
        """List jobs with the token and CRN; any 2xx means the CRN is usable."""
        try:
            response = await self.client.get(
                self.jobs_url,
                headers={
                    "Authorization": f"Bearer {bearer_token}",
                    self.service_crn_header: service_crn,
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Provider scope check rejected with status {e.response.status_code}.")
            return False
        except httpx.HTTPError as e:
            logger.warning(f"Provider scope check failed in transport: {type(e).__name__}: {e}")
            return False
        except UnicodeEncodeError:
            # Header values must be ASCII; a CRN outside it cannot name a service
            logger.warning("Provider scope check request could not be encoded.")
            return False
        return True

    async def validate(self, api_key: str, service_crn: str) -> CredentialValidationResult:
        bearer_token = await self._exchange_api_key_for_token(api_key)
        if not bearer_token:
            return CredentialValidationResult.token_exchange_failed()

        if not await self._probe_service_scope(bearer_token, service_crn):
            return CredentialValidationResult.scope_check_failed()

        logger.info("Provider credentials validated.")
        return CredentialValidationResult.accepted()


async def get_credential_validator() -> AsyncIterator[AbstractCredentialValidator]:
    """Dependency provider yielding a validator backed by a short-lived HTTP client."""
    async with httpx.AsyncClient(timeout=settings.provider_timeout_seconds) as http_client:
        yield ProviderCredentialValidator(http_client)
