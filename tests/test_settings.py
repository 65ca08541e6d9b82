# tests/test_settings.py
from qjob_tracker.settings import Settings


def test_server_address_comes_from_environment(monkeypatch):
    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("PORT", "6123")

    configured = Settings()

    assert configured.host == "127.0.0.1"
    assert configured.port == 6123


def test_server_address_defaults(monkeypatch):
    monkeypatch.delenv("HOST", raising=False)
    monkeypatch.delenv("PORT", raising=False)

    configured = Settings(_env_file=None)

    assert configured.port == 5000
