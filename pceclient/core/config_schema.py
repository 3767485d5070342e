"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in the client.

Each top-level class corresponds to one file in config/settings/:
    PCESchema      → pce.yaml
    LoggingSchema  → logging.yaml
"""

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# pce.yaml
# =============================================================================


class RateLimitSchema(_StrictBase):
    max_retries: int = Field(default=6, ge=0)
    backoff_seconds: float = Field(default=30.0, ge=0)


class AsyncJobsSchema(_StrictBase):
    max_malformed_polls: int = Field(default=5, ge=1)


class CollectionsSchema(_StrictBase):
    async_threshold: int = Field(default=500, ge=1)


class PCESchema(_StrictBase):
    fqdn: str = Field(min_length=1)
    port: int = 443
    org_id: int = 1
    disable_tls_checking: bool = False
    proxy: str | None = None
    timeout_seconds: float = Field(default=60.0, gt=0)
    rate_limit: RateLimitSchema = Field(default_factory=RateLimitSchema)
    async_jobs: AsyncJobsSchema = Field(default_factory=AsyncJobsSchema)
    collections: CollectionsSchema = Field(default_factory=CollectionsSchema)


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema
