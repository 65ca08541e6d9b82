# qjob_tracker/provider/__init__.py
"""
External quantum provider integration.

Validates a user's API key and service CRN against the provider before an
account is created for them.
"""

from .models import (
    CredentialCheckOutcome,
    CredentialValidationResult,
    OUTCOME_REASONS
)
from .validator import (
    AbstractCredentialValidator,
    ProviderCredentialValidator,
    get_credential_validator
)

__all__ = [
    "CredentialCheckOutcome",
    "CredentialValidationResult",
    "OUTCOME_REASONS",
    "AbstractCredentialValidator",
    "ProviderCredentialValidator",
    "get_credential_validator",
]
