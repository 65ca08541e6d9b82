# tests/conftest.py
import asyncio
import logging
import time
from typing import Callable, List, Tuple

import httpx
import pytest

from qjob_tracker.settings import settings
from qjob_tracker.storage import sqlite_base
from qjob_tracker.users import sqlite_user_store
from qjob_tracker.users.password_hasher import BcryptPasswordHasher
from qjob_tracker.provider.models import CredentialValidationResult
from qjob_tracker.provider.validator import AbstractCredentialValidator

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
)

VALID_API_KEY = "key-valid"
VALID_CRN = "crn:valid"


class StubCredentialValidator(AbstractCredentialValidator):
    """Accepts one API key / CRN pair and records every call."""

    def __init__(self, api_key: str = VALID_API_KEY, service_crn: str = VALID_CRN):
        self.api_key = api_key
        self.service_crn = service_crn
        self.calls: List[Tuple[str, str]] = []

    async def validate(self, api_key: str, service_crn: str) -> CredentialValidationResult:
        self.calls.append((api_key, service_crn))
        if api_key != self.api_key:
            return CredentialValidationResult.token_exchange_failed()
        if service_crn != self.service_crn:
            return CredentialValidationResult.scope_check_failed()
        return CredentialValidationResult.accepted()


class GatedCredentialValidator(StubCredentialValidator):
    """Holds every caller until `expected_callers` have arrived, then accepts them all."""

    def __init__(self, expected_callers: int):
        super().__init__()
        self.expected_callers = expected_callers
        self._all_arrived = asyncio.Event()

    async def validate(self, api_key: str, service_crn: str) -> CredentialValidationResult:
        self.calls.append((api_key, service_crn))
        if len(self.calls) >= self.expected_callers:
            self._all_arrived.set()
        await asyncio.wait_for(self._all_arrived.wait(), timeout=5)
        return CredentialValidationResult.accepted()


async def _reset_user_storage() -> None:
    await sqlite_base.close_sqlite_db_connection()
    sqlite_user_store._sqlite_user_store_instance = None


@pytest.fixture
async def isolated_db(tmp_path, monkeypatch):
    """Point the user directory at a fresh SQLite file for one test."""
    monkeypatch.setattr(settings, "sqlite_db_path", str(tmp_path / "users.sqlite3"))
    await _reset_user_storage()
    yield tmp_path / "users.sqlite3"
    await _reset_user_storage()


@pytest.fixture
async def user_store(isolated_db):
    return await sqlite_user_store.get_sqlite_user_store()


@pytest.fixture
def fast_hasher():
    # Lowest bcrypt cost keeps the suite fast
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def stub_validator():
    return StubCredentialValidator()


@pytest.fixture
async def api_client(isolated_db, stub_validator, fast_hasher):
    """In-process HTTP client for the app with the provider stubbed out."""
    from qjob_tracker.main import app
    from qjob_tracker.provider.validator import get_credential_validator
    from qjob_tracker.users.endpoints import get_password_hasher_dependency

    app.dependency_overrides[get_credential_validator] = lambda: stub_validator
    app.dependency_overrides[get_password_hasher_dependency] = lambda: fast_hasher
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll a condition that another thread will make true."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()
