# tests/test_api_endpoints.py
import pytest

from conftest import VALID_API_KEY, VALID_CRN

ALICE_SIGNUP = {
    "username": "alice",
    "email": "a@x.com",
    "password": "pw",
    "crn": VALID_CRN,
    "api": VALID_API_KEY,
}


async def test_liveness(api_client):
    response = await api_client.get("/")

    assert response.status_code == 200
    assert response.text == "Quantum Job Tracker API is running"


async def test_signup_then_repeat(api_client):
    first = await api_client.post("/api/signup", json=ALICE_SIGNUP)

    assert first.status_code == 201
    body = first.json()
    assert body["message"] == "User created successfully"
    assert body["userId"]

    repeat = await api_client.post("/api/signup", json=ALICE_SIGNUP)

    assert repeat.status_code == 400
    assert repeat.json() == {"error": "User with this email or username already exists"}


@pytest.mark.parametrize(
    "field, value, error",
    [
        ("api", "key-wrong", "Invalid API key"),
        ("crn", "crn:wrong", "Invalid CRN"),
    ],
)
async def test_signup_reports_which_credential_failed(api_client, field, value, error):
    response = await api_client.post("/api/signup", json={**ALICE_SIGNUP, field: value})

    assert response.status_code == 400
    assert response.json() == {"error": error}

    login = await api_client.post("/api/login", json={"email": "a@x.com", "password": "pw"})
    assert login.status_code == 401


@pytest.mark.parametrize("missing", ["username", "email", "password", "crn", "api"])
async def test_signup_requires_every_field(api_client, stub_validator, missing):
    payload = {k: v for k, v in ALICE_SIGNUP.items() if k != missing}

    response = await api_client.post("/api/signup", json=payload)

    assert response.status_code == 400
    assert missing in response.json()["error"]
    assert stub_validator.calls == []


async def test_signup_rejects_empty_values(api_client):
    response = await api_client.post("/api/signup", json={**ALICE_SIGNUP, "password": ""})

    assert response.status_code == 400
    assert "error" in response.json()


async def test_login_success(api_client):
    created = (await api_client.post("/api/signup", json=ALICE_SIGNUP)).json()

    response = await api_client.post("/api/login", json={"email": "a@x.com", "password": "pw"})

    assert response.status_code == 200
    assert response.json() == {"userId": created["userId"], "username": "alice", "email": "a@x.com"}


async def test_long_password_signup_and_login(api_client):
    long_password = "p" * 100
    signup = await api_client.post("/api/signup", json={**ALICE_SIGNUP, "password": long_password})

    assert signup.status_code == 201

    login = await api_client.post("/api/login", json={"email": "a@x.com", "password": long_password})

    assert login.status_code == 200
    assert login.json()["userId"] == signup.json()["userId"]


async def test_login_wrong_password_and_unknown_email_look_the_same(api_client):
    await api_client.post("/api/signup", json=ALICE_SIGNUP)

    wrong_password = await api_client.post("/api/login", json={"email": "a@x.com", "password": "nope"})
    unknown_email = await api_client.post("/api/login", json={"email": "ghost@x.com", "password": "pw"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"error": "Invalid credentials"}


async def test_unexpected_failures_return_generic_500(api_client):
    from qjob_tracker.main import app
    from qjob_tracker.users.sqlite_user_store import get_sqlite_user_store

    class BrokenStore:
        async def get_user_by_email(self, email):
            raise RuntimeError("database is locked")

    app.dependency_overrides[get_sqlite_user_store] = lambda: BrokenStore()

    response = await api_client.post("/api/login", json={"email": "a@x.com", "password": "pw"})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


async def test_health_reports_sqlite(api_client):
    response = await api_client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["details"]["sqlite_user_db"] == "healthy"


async def test_unknown_route_uses_error_shape(api_client):
    response = await api_client.get("/api/nothing-here")

    assert response.status_code == 404
    assert "error" in response.json()
