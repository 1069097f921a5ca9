"""Configuration schema for split and merge."""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from file_splitter.common import ConfigurationError, LoggingConfig

from .sizes import MAX_BUFFER_SIZE, parse_chunk_size


class SplitConfig(BaseModel):
    """Configuration for splitting."""

    model_config = ConfigDict(extra='forbid')

    chunk_size: str = Field(
        default="10MB",
        description="Chunk size with unit suffix (KB, MB, GB), e.g. '10MB' or '512:KB'"
    )
    buffer_size: int = Field(
        default=MAX_BUFFER_SIZE,
        ge=1,
        le=MAX_BUFFER_SIZE,
        description="Bytes copied per read while streaming"
    )
    output_dir: str | None = Field(
        default=None,
        description="Directory for chunks and summary (default: next to the source file)"
    )

    @field_validator('chunk_size', mode='before')
    @classmethod
    def validate_chunk_size(cls, v: str | int) -> str:
        """Reject chunk sizes the parser would reject. Bare numbers are KB."""
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        if not isinstance(v, str):
            raise ValueError(f"Chunk size must be text like '10MB', got {v!r}")
        try:
            parse_chunk_size(v)
        except ConfigurationError as e:
            raise ValueError(e.message) from e
        return v

    @property
    def chunk_size_bytes(self) -> int:
        return parse_chunk_size(self.chunk_size)


class MergeConfig(BaseModel):
    """Configuration for merging."""

    model_config = ConfigDict(extra='forbid')

    buffer_size: int = Field(
        default=MAX_BUFFER_SIZE,
        ge=1,
        le=MAX_BUFFER_SIZE,
        description="Bytes copied per read while streaming"
    )
    output_dir: str | None = Field(
        default=None,
        description="Directory for the reconstructed file (default: next to the summary file)"
    )
    assume_yes: bool = Field(
        default=False,
        description="Continue past size and checksum mismatches without asking"
    )


class FileSplitterConfig(BaseModel):
    """Root configuration for file splitter."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    split: SplitConfig = Field(default_factory=SplitConfig)
    merge: MergeConfig = Field(default_factory=MergeConfig)
