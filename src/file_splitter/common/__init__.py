"""Common utilities for file_splitter packages."""

from .config import ConfigLoader
from .logging import setup_logging, LogContext
from .logging_config import LoggingConfig
from .errors import (
    FileSplitterError, ConfigurationError, FileProcessingError,
    OutputExistsError, TruncatedFileError
)
from .path_utils import to_segments, from_segments, is_single_segment
from .checksums import (
    DIGEST_SIZE, new_digest, compute_sha256, compute_sha256_hex, to_hex, from_hex
)

__all__ = [
    'ConfigLoader',
    'LoggingConfig',
    'setup_logging',
    'LogContext',
    'FileSplitterError',
    'ConfigurationError',
    'FileProcessingError',
    'OutputExistsError',
    'TruncatedFileError',
    'to_segments',
    'from_segments',
    'is_single_segment',
    'DIGEST_SIZE',
    'new_digest',
    'compute_sha256',
    'compute_sha256_hex',
    'to_hex',
    'from_hex',
]
