"""Base error definitions for file_splitter packages."""

from typing import Any, Dict


class FileSplitterError(Exception):
    """Base exception for all file_splitter errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class ConfigurationError(FileSplitterError):
    """Configuration value is invalid (chunk size, unit, buffer size)."""
    pass


class FileProcessingError(FileSplitterError):
    """Base exception for file processing errors."""
    pass


class OutputExistsError(FileProcessingError):
    """Output target already exists and must not be overwritten."""
    pass


class TruncatedFileError(FileProcessingError):
    """File ended before the expected number of bytes was read."""
    pass
