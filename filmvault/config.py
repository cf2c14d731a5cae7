"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - Every rate-limit group has a window, a max and a rejection message

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Flat RATE_LIMIT_<GROUP>_* fields over nested models: one env var per knob, no delimiter rules
    - Auto-provisioning on purchase is a policy switch, not hard-coded behaviour
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from filmvault.core.rate_admission import AdmissionPolicy


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    environment: Literal["development", "production", "test"] = "development"

    # Database
    database_url: str = (
        "postgresql+asyncpg://filmvault:filmvault@db:5432/filmvault"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # API
    cors_origins: list[str] = ["*"]

    # Purchases
    purchase_auto_provision: bool = True
    auto_provision_email_template: str = "user-{account_id}@filmvault.local"
    auto_provision_name_template: str = "User {account_id}"

    # Rate limiting (window in seconds)
    rate_limit_account_create_window: int = 3600
    rate_limit_account_create_max: int = 5
    rate_limit_account_create_message: str = "Too many accounts created from this IP"
    rate_limit_item_create_window: int = 900
    rate_limit_item_create_max: int = 20
    rate_limit_item_create_message: str = "Too many item uploads"
    rate_limit_purchase_window: int = 900
    rate_limit_purchase_max: int = 10
    rate_limit_purchase_message: str = "Too many purchase attempts"
    rate_limit_query_window: int = 60
    rate_limit_query_max: int = 50
    rate_limit_query_message: str = "Too many queries"
    rate_limit_max_keys: int = 10_000

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"
    slow_request_ms: int = 1000

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def admission_policies(self) -> dict[str, AdmissionPolicy]:
        """One AdmissionPolicy per rate-limit group, keyed by group name."""
        return {
            group: AdmissionPolicy(
                window_seconds=getattr(self, f"rate_limit_{group}_window"),
                max_requests=getattr(self, f"rate_limit_{group}_max"),
                message=getattr(self, f"rate_limit_{group}_message"),
            )
            for group in ("account_create", "item_create", "purchase", "query")
        }


@lru_cache
def get_settings() -> Settings:
    return Settings()
