"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend selection (driver and notifier) is validated
at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DRIVER_BACKENDS = ("memory", "firestore")
NOTIFIER_BACKENDS = ("memory", "redis")
TELEMETRY_EXPORTERS = ("console", "otlp", "none")


class Settings(BaseSettings):
    """Settings loaded from environment and .env.

    All settings are optional with defaults. The default runtime is fully
    in-process (memory driver + memory notifier) so nothing external is
    required to open a store.
    """

    # App
    app_name: str = "docsync"
    app_version: str = "1.0.0"
    debug: bool = False
    # open_store() calls setup_logging() when set (leave off when embedding)
    configure_logging: bool = False

    # Driver: "memory" (in-process dicts) or "firestore" (Firestore REST API)
    driver_backend: str = "memory"

    # Firebase / Firestore: use key (env) or path (file).
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None  # Path to JSON file
    firestore_collections_name: str = "collections"
    firestore_documents_name: str = "documents"
    firestore_timeout_seconds: float = 30.0

    # Notifier: "memory" (in-process fan-out) or "redis" (pub/sub)
    notifier_backend: str = "memory"
    notifier_history_size: int = 0

    # Redis pub/sub
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_channel_prefix: str = "docsync"

    # Root collection of the tree opened by open_store()
    root_collection_id: str = "root"
    root_collection_name: str = "root"
    root_path: str = ""

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_prefix="DOCSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backends(self) -> "Settings":
        """Validate driver and notifier backends.

        - Firestore: FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH required.
        - Unknown backend names are rejected.
        """
        if self.driver_backend == "firestore":
            has_key = (
                self.firebase_service_account_key
                and self.firebase_service_account_key.get_secret_value()
            )
            if not has_key and not self.firebase_service_account_path:
                raise ValueError(
                    "When driver_backend is 'firestore', set DOCSYNC_FIREBASE_SERVICE_ACCOUNT_KEY "
                    "(full JSON string) or DOCSYNC_FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file)."
                )
        elif self.driver_backend not in DRIVER_BACKENDS:
            raise ValueError(
                f"driver_backend must be one of {DRIVER_BACKENDS}, got: {self.driver_backend!r}"
            )
        if self.notifier_backend not in NOTIFIER_BACKENDS:
            raise ValueError(
                f"notifier_backend must be one of {NOTIFIER_BACKENDS}, got: {self.notifier_backend!r}"
            )
        if self.notifier_history_size < 0:
            raise ValueError("notifier_history_size must be >= 0")
        if self.telemetry_exporter not in TELEMETRY_EXPORTERS:
            raise ValueError(
                f"telemetry_exporter must be one of {TELEMETRY_EXPORTERS}, got: {self.telemetry_exporter!r}"
            )
        if self.telemetry_exporter == "otlp" and not self.telemetry_otlp_endpoint:
            raise ValueError("telemetry_exporter 'otlp' needs telemetry_otlp_endpoint")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
