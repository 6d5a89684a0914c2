"""Application settings."""

from enum import StrEnum

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreBackend(StrEnum):
    """Available shared store adapters for job records."""

    IN_MEMORY = "in_memory"
    POSTGRES = "postgres"


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "Not Found Suggestions"
    api_prefix: str = ""
    public_url: str | None = None
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    job_ttl_seconds: int = 120
    error_ttl_seconds: int = 60
    cached_completion_ttl_seconds: int = 300
    recovery_threshold_seconds: int = 90
    store_backend: StoreBackend = StoreBackend.IN_MEMORY
    store_purge_interval_seconds: float = 300.0
    postgres_dsn: str | None = None
    postgres_pool_min_size: int = 1
    postgres_pool_max_size: int = 10
    dispatch_timeout_seconds: float = 5.0
    poll_rate_limit_max_requests: int = 120
    poll_rate_limit_window_seconds: int = 60
    compute_rate_limit_max_requests: int = 60
    compute_rate_limit_window_seconds: int = 60
    trigger_rate_limit_max_requests: int = 30
    trigger_rate_limit_window_seconds: int = 60
    poll_nonce_secret: str | None = None
    poll_nonce_lifetime_seconds: int = 3600
    site_base_path: str = ""
    suggest_categories: bool = True
    suggest_tags: bool = True
    catalog_path: str | None = None
    suggestion_limit: int = 10
    suggestion_min_score: float = 0.35

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        """Accept `INFO`, `Info` and `info` alike."""

        if not isinstance(value, str):
            return value
        return value.strip().lower()

    @model_validator(mode="after")
    def validate_job_settings(self) -> "Settings":
        """Ensure timings, limits and backend-specific settings are valid."""

        if self.recovery_threshold_seconds < 1:
            raise ValueError("NFS_RECOVERY_THRESHOLD_SECONDS must be >= 1.")
        if self.job_ttl_seconds <= self.recovery_threshold_seconds:
            raise ValueError(
                "NFS_JOB_TTL_SECONDS must be > NFS_RECOVERY_THRESHOLD_SECONDS."
            )
        if self.error_ttl_seconds < 1:
            raise ValueError("NFS_ERROR_TTL_SECONDS must be >= 1.")
        if self.cached_completion_ttl_seconds < 1:
            raise ValueError("NFS_CACHED_COMPLETION_TTL_SECONDS must be >= 1.")
        if self.store_purge_interval_seconds <= 0:
            raise ValueError("NFS_STORE_PURGE_INTERVAL_SECONDS must be > 0.")
        if self.store_backend == StoreBackend.POSTGRES and not self.postgres_dsn:
            raise ValueError("NFS_POSTGRES_DSN is required when NFS_STORE_BACKEND=postgres.")
        if self.postgres_pool_min_size < 1:
            raise ValueError("NFS_POSTGRES_POOL_MIN_SIZE must be >= 1.")
        if self.postgres_pool_max_size < self.postgres_pool_min_size:
            raise ValueError(
                "NFS_POSTGRES_POOL_MAX_SIZE must be >= NFS_POSTGRES_POOL_MIN_SIZE."
            )
        if self.dispatch_timeout_seconds <= 0:
            raise ValueError("NFS_DISPATCH_TIMEOUT_SECONDS must be > 0.")
        for action in ("poll", "compute", "trigger"):
            if getattr(self, f"{action}_rate_limit_max_requests") < 1:
                raise ValueError(f"NFS_{action.upper()}_RATE_LIMIT_MAX_REQUESTS must be >= 1.")
            if getattr(self, f"{action}_rate_limit_window_seconds") < 1:
                raise ValueError(
                    f"NFS_{action.upper()}_RATE_LIMIT_WINDOW_SECONDS must be >= 1."
                )
        if self.poll_nonce_lifetime_seconds < 1:
            raise ValueError("NFS_POLL_NONCE_LIFETIME_SECONDS must be >= 1.")
        if self.suggestion_limit < 1:
            raise ValueError("NFS_SUGGESTION_LIMIT must be >= 1.")
        if not 0.0 <= self.suggestion_min_score <= 1.0:
            raise ValueError("NFS_SUGGESTION_MIN_SCORE must be between 0 and 1.")
        return self

    model_config = SettingsConfigDict(env_prefix="NFS_", extra="ignore")


__all__ = ["Settings", "StoreBackend"]
