#lifecycle_engine\config.py

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class LifecycleSettings(BaseSettings):
    """Lifecycle engine configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LIFECYCLE_",
        case_sensitive=False,
        extra="ignore"
    )

    # Kubernetes: empty kubeconfig means in-cluster service account
    kubeconfig: Optional[str] = None
    namespace_prefix: str = "astro-user"
    managed_by: str = "astro"

    # Background reconciliation
    reconcile_workers: int = 8

    # API
    default_log_lines: int = 100
    log_level: str = "INFO"
