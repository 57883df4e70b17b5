"""Settings and ClientSettings validation."""

import pytest
from pydantic import ValidationError

from tasksync.core.config import ClientSettings, Settings, get_settings


def test_defaults_use_memory_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_BACKEND", raising=False)
    settings = Settings(_env_file=None)
    assert settings.database_backend == "memory"
    assert settings.firestore_collection == "tasks"


def test_unknown_backend_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, database_backend="postgres")


def test_firestore_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FIREBASE_SERVICE_ACCOUNT_KEY", raising=False)
    monkeypatch.delenv("FIREBASE_SERVICE_ACCOUNT_PATH", raising=False)
    with pytest.raises(ValidationError):
        Settings(_env_file=None, database_backend="firestore")
    settings = Settings(
        _env_file=None,
        database_backend="firestore",
        firebase_service_account_path="/tmp/key.json",
    )
    assert settings.database_backend == "firestore"


def test_get_settings_reads_env_after_cache_clear(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_NAME", "tasksync-test")
    get_settings.cache_clear()
    try:
        assert get_settings().app_name == "tasksync-test"
    finally:
        get_settings.cache_clear()


def test_client_defaults() -> None:
    settings = ClientSettings(_env_file=None)
    assert settings.reconnect_attempts == 5
    assert settings.reconnect_delay == 1.0
    assert settings.reconnect_delay_max == 5.0
    assert settings.optimistic is False


def test_client_ws_url_derived_from_api_url() -> None:
    assert (
        ClientSettings(_env_file=None, api_url="https://tasks.example.com/").resolved_ws_url
        == "wss://tasks.example.com/api/v1/ws"
    )
    assert (
        ClientSettings(_env_file=None, api_url="http://localhost:8000").resolved_ws_url
        == "ws://localhost:8000/api/v1/ws"
    )
    assert (
        ClientSettings(_env_file=None, ws_url="ws://other/ws").resolved_ws_url == "ws://other/ws"
    )


def test_client_env_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKSYNC_OPTIMISTIC", "true")
    monkeypatch.setenv("TASKSYNC_RECONNECT_ATTEMPTS", "2")
    settings = ClientSettings(_env_file=None)
    assert settings.optimistic is True
    assert settings.reconnect_attempts == 2


@pytest.mark.parametrize(
    "overrides",
    [
        {"reconnect_attempts": -1},
        {"reconnect_delay": 6.0},
        {"reconnect_backoff": 0.5},
    ],
)
def test_client_rejects_bad_reconnect_policy(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        ClientSettings(_env_file=None, **overrides)
