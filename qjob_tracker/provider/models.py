# qjob_tracker/provider/models.py
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class CredentialCheckOutcome(str, Enum):
    """Where a provider credential check ended up."""
    VALID = "valid"
    TOKEN_EXCHANGE_FAILED = "token_exchange_failed"
    SCOPE_CHECK_FAILED = "scope_check_failed"


# Caller-facing reasons; they tell the user which field to fix.
OUTCOME_REASONS = {
    CredentialCheckOutcome.TOKEN_EXCHANGE_FAILED: "Invalid API key",
    CredentialCheckOutcome.SCOPE_CHECK_FAILED: "Invalid CRN",
}


class CredentialValidationResult(BaseModel):
    """Result of validating an API key / service CRN pair against the provider."""
    outcome: CredentialCheckOutcome

    @property
    def valid(self) -> bool:
        return self.outcome is CredentialCheckOutcome.VALID

    @property
    def reason(self) -> Optional[str]:
        return OUTCOME_REASONS.get(self.outcome)

    @classmethod
    def accepted(cls) -> "CredentialValidationResult":
        return cls(outcome=CredentialCheckOutcome.VALID)

    @classmethod
    def token_exchange_failed(cls) -> "CredentialValidationResult":
        return cls(outcome=CredentialCheckOutcome.TOKEN_EXCHANGE_FAILED)

    @classmethod
    def scope_check_failed(cls) -> "CredentialValidationResult":
        return cls(outcome=CredentialCheckOutcome.SCOPE_CHECK_FAILED)
