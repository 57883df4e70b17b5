"""Application configuration (settings and environment).

Single source of truth for server and client configuration. Uses
pydantic-settings with .env support. Backend selection and credentials are
validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DATABASE_BACKENDS = ("memory", "firestore")


class Settings(BaseSettings):
    """Server settings loaded from environment and .env.

    All settings have defaults; validate_backend rejects unknown backends and a
    Firestore backend without service account credentials.
    """

    # App
    app_name: str = "tasksync"
    app_version: str = "1.0.0"
    debug: bool = False

    # Store: "memory" (process-local, default) or "firestore" (Firestore REST API)
    database_backend: str = "memory"
    firestore_collection: str = "tasks"

    # Firebase / Firestore: use key (env) or path (file).
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None

    # CORS
    allowed_origins: str = "http://localhost:5173,http://localhost:3000"

    # Request / middleware
    request_timeout_seconds: int = 60
    request_id_header: str = "X-Request-ID"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backend(self) -> "Settings":
        """Validate the store backend and its credentials.

        - memory: nothing required.
        - firestore: FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH required.
        """
        if self.database_backend not in DATABASE_BACKENDS:
            raise ValueError(
                f"database_backend must be one of {DATABASE_BACKENDS}, got: {self.database_backend!r}"
            )
        if self.database_backend == "firestore":
            has_key = (
                self.firebase_service_account_key
                and self.firebase_service_account_key.get_secret_value()
            )
            if not has_key and not self.firebase_service_account_path:
                raise ValueError(
                    "When database_backend is 'firestore', set FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) "
                    "or FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file)."
                )
        return self


class ClientSettings(BaseSettings):
    """Sync client settings (env prefix TASKSYNC_).

    Reconnect defaults: 5 attempts, 1s initial delay doubling up to 5s.
    Set reconnect_backoff to 1.0 for a fixed delay.
    """

    api_url: str = "http://localhost:8000"
    ws_url: str | None = None
    request_timeout: float = 10.0
    open_timeout: float = 20.0
    reconnect_attempts: int = 5
    reconnect_delay: float = 1.0
    reconnect_delay_max: float = 5.0
    reconnect_backoff: float = 2.0
    optimistic: bool = False

    model_config = SettingsConfigDict(
        env_prefix="TASKSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_reconnect(self) -> "ClientSettings":
        """Reject negative attempts/delays and a shrinking backoff."""
        if self.reconnect_attempts < 0:
            raise ValueError("reconnect_attempts must be >= 0")
        if self.reconnect_delay < 0 or self.reconnect_delay_max < self.reconnect_delay:
            raise ValueError("reconnect_delay must be >= 0 and <= reconnect_delay_max")
        if self.reconnect_backoff < 1.0:
            raise ValueError("reconnect_backoff must be >= 1.0")
        return self

    @property
    def resolved_ws_url(self) -> str:
        """WebSocket URL: ws_url if set, else derived from api_url."""
        if self.ws_url:
            return self.ws_url
        base = self.api_url.rstrip("/")
        base = base.replace("https://", "wss://", 1).replace("http://", "ws://", 1)
        return f"{base}/api/v1/ws"


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()


@lru_cache
def get_client_settings() -> ClientSettings:
    """Return cached sync client settings."""
    return ClientSettings()
