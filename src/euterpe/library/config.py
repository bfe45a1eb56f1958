"""Configuration models for the library engine."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from euterpe.common import LoggingConfig


class ScanConfig(BaseModel):
    """Throttling of library scans."""

    model_config = ConfigDict(extra='forbid')

    initial_wait: float = Field(
        default=1.0,
        ge=0,
        description="Seconds to wait before a scan touches the filesystem"
    )
    files_per_operation: int = Field(
        default=1500,
        ge=0,
        description="Files a walker processes between pauses (0 disables pausing)"
    )
    sleep_per_operation: float = Field(
        default=0.015,
        ge=0,
        description="Seconds a walker sleeps after each batch of files"
    )


class LibraryConfig(BaseModel):
    """Library roots, storage and scan behaviour."""

    model_config = ConfigDict(extra='forbid')

    paths: list[str] = Field(
        default_factory=list,
        description="Root directories scanned for media, in order"
    )
    database_path: str | None = Field(
        default=None,
        description="Path to the SQLite catalog (default: user data dir)"
    )
    scan: ScanConfig = Field(default_factory=ScanConfig)
    fast_scan: bool = Field(
        default=False,
        description="Disable all throttling sleeps"
    )
    watch: bool = Field(
        default=True,
        description="Keep the catalog in sync with filesystem change notifications"
    )

    @field_validator('paths', mode='before')
    @classmethod
    def split_single_path(cls, v):
        """A lone string (e.g. from an environment override) is one root."""
        if isinstance(v, str):
            return [v]
        return v


class EuterpeLibraryConfig(BaseModel):
    """Root configuration for the library engine."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    library: LibraryConfig = Field(default_factory=LibraryConfig)
