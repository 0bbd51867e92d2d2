"""API configuration via environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from miles_tracker_core.limits import QueryLimits


class ApiSettings(BaseSettings):
    """Application settings loaded from environment / .env file."""

    database_url: str = "postgresql+asyncpg://localhost:5432/miles_tracker"
    # Static bearer token for /api/*; empty rejects every request.
    auth_token: str = ""
    cors_origins: list[str] = ["http://localhost:5173"]

    # Query defaults and ceilings
    default_origin: str = "KUL"
    default_limit: int = 200
    max_limit: int = 500

    # Bulk upsert
    max_upsert_records: int = 500
    storage_batch_chunk_size: int = 50  # store's statements-per-batch ceiling

    model_config = SettingsConfigDict(
        env_prefix="MILES_", env_file=".env", extra="ignore"
    )

    @property
    def limits(self) -> QueryLimits:
        return QueryLimits(
            default_origin=self.default_origin,
            default_limit=self.default_limit,
            max_limit=self.max_limit,
            max_upsert_records=self.max_upsert_records,
            storage_batch_chunk_size=self.storage_batch_chunk_size,
        )


settings = ApiSettings()
