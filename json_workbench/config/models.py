"""Configuration models for the JSON workbench."""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class AnalyzerConfig(BaseModel):
    """Thresholds used by the structural analyzer."""

    max_depth: int = Field(10, description="Nodes deeper than this are flagged", ge=1, le=1000)
    max_array_length: int = Field(1000, description="Arrays longer than this are flagged", ge=1)
    max_string_length: int = Field(10000, description="Strings longer than this are flagged", ge=1)
    repeated_key_threshold: int = Field(
        50,
        description="Key names occurring more often than this are reported",
        ge=1
    )
    duplicate_preview: int = Field(3, description="Duplicate values listed per issue", ge=1, le=100)
    key_preview: int = Field(5, description="Expected keys shown for inconsistent elements", ge=1, le=100)
    identifier_keys: List[str] = Field(
        default_factory=lambda: ["id", "_id", "ID", "uuid", "key"],
        description="Identifier-like keys checked for duplicates, in priority order"
    )

    @field_validator('identifier_keys')
    @classmethod
    def validate_identifier_keys(cls, v):
        """Validate that at least one non-empty identifier key is configured."""
        keys = [key for key in v if key]
        if not keys:
            raise ValueError("At least one identifier key is required")
        return keys


class HistoryConfig(BaseModel):
    """Configuration for the version history."""

    capacity: int = Field(50, description="Maximum number of retained snapshots", ge=1, le=10000)


class QueryConfig(BaseModel):
    """Configuration for the query tool."""

    max_examples: int = Field(6, description="Maximum number of suggested example queries", ge=0, le=50)
    max_matches: Optional[int] = Field(
        None,
        description="Truncate tool responses to this many matches (None for all)",
        ge=1
    )


class RedisConfig(BaseModel):
    """Configuration for Redis session storage."""

    host: str = Field("localhost", description="Redis server hostname")
    port: int = Field(6379, description="Redis server port", ge=1, le=65535)
    password: Optional[str] = Field(None, description="Redis server password")
    db: int = Field(0, description="Redis database number", ge=0, le=15)
    connection_timeout: int = Field(5, description="Connection timeout in seconds", ge=1, le=60)
    socket_timeout: int = Field(5, description="Socket timeout in seconds", ge=1, le=60)
    max_connections: int = Field(10, description="Maximum connections in pool", ge=1, le=100)
    key_prefix: str = Field("json_workbench:session:", description="Prefix for session keys")


class WorkbenchConfig(BaseModel):
    """Main configuration container for the JSON workbench."""

    analyzer_config: AnalyzerConfig = Field(default_factory=AnalyzerConfig, description="Analyzer thresholds")
    history_config: HistoryConfig = Field(default_factory=HistoryConfig, description="Version history settings")
    query_config: QueryConfig = Field(default_factory=QueryConfig, description="Query tool settings")
    redis_config: Optional[RedisConfig] = Field(
        None,
        description="Optional Redis configuration for persistent session storage"
    )
    prefer_redis: bool = Field(
        False,
        description="Prefer Redis over memory storage when both are available"
    )
    max_document_size: int = Field(
        10485760,  # 10MB
        description="Maximum serialized document size in bytes",
        ge=1024,
        le=104857600
    )
    max_session_bytes: int = Field(
        4 * 1024 * 1024,
        description="Sessions larger than this have their history trimmed before saving",
        ge=1024
    )
    log_level: str = Field("INFO", description="Logging level")
    session_ttl: int = Field(
        86400,
        description="Session TTL in seconds",
        ge=60,
        le=604800
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate that log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(sorted(valid_levels))}")
        return v.upper()

    model_config = {
        "validate_assignment": True,
        "extra": "forbid",
    }
