# SPDX-License-Identifier: Apache-2.0
"""All configuration via environment variables (12-factor). No hardcoded values."""
from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = Field(default="sqlite:///./africa_research_base.db", description="Database URL")

    # Storage
    upload_dir: str = Field(default="./uploads", description="Directory for uploaded dataset files")
    max_upload_size_mb: int = Field(default=50, ge=1, le=2000, description="Max upload size in MB")
    public_base_url: str = Field(default="http://localhost:8000", description="Base URL used to build file URLs")

    # Security: required in production; set in .env
    secret_key: str = Field(default="dev-secret-key-change-in-production", min_length=16)
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24, ge=1)

    # CORS
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Rate limiting: memory:// for one process, redis://host:6379 to share counters between instances
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_storage_uri: str = Field(default="memory://")
    signup_rate_limit: str = Field(default="5 per 15 minutes")

    # Generative AI
    anthropic_api_key: str | None = Field(default=None, description="Anthropic API key; heuristic scoring when unset")
    anthropic_model: str = Field(default="claude-sonnet-4-5-20250929")
    ai_max_tokens: int = Field(default=1024, ge=64, le=8192)
    ai_timeout_seconds: float = Field(default=30.0, gt=0)

    # Optional: Solana registration of dataset metadata
    solana_rpc_url: str | None = Field(default=None, description="Solana JSON-RPC endpoint")
    solana_program_id: str | None = Field(default=None, description="Research base program id (base58)")
    solana_keypair: str | None = Field(
        default=None,
        description="Service keypair: JSON array of 64 ints, or a path to a keypair file (never commit)",
    )

    # Logging
    log_level: str = Field(default="INFO")

    # Derived / internal
    @property
    def upload_dir_path(self) -> Path:
        return Path(self.upload_dir)

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def production(self) -> bool:
        return self.secret_key != "dev-secret-key-change-in-production"

    @property
    def chain_enabled(self) -> bool:
        return bool(self.solana_rpc_url and self.solana_program_id and self.solana_keypair)


settings = Settings()

UPLOADS_DIR = settings.upload_dir_path
MAX_UPLOAD_MB = settings.max_upload_size_mb
MAX_UPLOAD_BYTES = settings.max_upload_bytes
DATABASE_URL = settings.database_url
PRODUCTION = settings.production
ALLOWED_UPLOAD_EXTENSIONS = {".csv", ".xlsx", ".xls", ".pdf", ".txt"}
MAX_CSV_COLUMNS = 100
