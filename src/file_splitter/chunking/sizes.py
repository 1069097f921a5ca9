"""Chunk size units and chunk-boundary arithmetic."""

import re

from file_splitter.common import ConfigurationError

KB = 1024
MB = KB * 1024
GB = MB * 1024

UNITS = {
    "KB": KB,
    "MB": MB,
    "GB": GB,
}

DEFAULT_CHUNK_SIZE = 10 * MB
MAX_CHUNK_SIZE = 2**31 - 1
# Streaming buffer cap, independent of the chunk size
MAX_BUFFER_SIZE = 8 * MB

CHUNK_SUFFIX = ".part"

_SIZE_PATTERN = re.compile(r"^\s*([+-]?\d+)\s*:?\s*([A-Za-z]*)\s*$")


def parse_chunk_size(text: str) -> int:
    """Parse a chunk size such as ``10MB``, ``10 MB`` or ``10:MB``.

    Units are KB, MB and GB (powers of 1024, case-insensitive). An unknown
    or missing unit falls back to KB.

    Raises:
        ConfigurationError: If the magnitude is not a positive integer or the
            resulting size is above MAX_CHUNK_SIZE
    """
    match = _SIZE_PATTERN.match(text)
    if not match:
        raise ConfigurationError(f"Malformed chunk size: {text!r}", value=text)

    magnitude = int(match.group(1))
    unit = match.group(2).upper()
    size = magnitude * UNITS.get(unit, KB)

    if size <= 0:
        raise ConfigurationError(f"Chunk size must be positive: {text!r}", value=text)
    if size > MAX_CHUNK_SIZE:
        raise ConfigurationError(
            f"Chunk size {size} exceeds maximum of {MAX_CHUNK_SIZE} bytes",
            value=text
        )
    return size


def count_chunks(total_size: int, chunk_size: int) -> int:
    """Number of chunks needed: ceil(total_size / chunk_size)."""
    if chunk_size <= 0:
        raise ConfigurationError(f"Chunk size must be positive, got {chunk_size}", chunk_size=chunk_size)
    return -(-total_size // chunk_size)


def expected_chunk_size(total_size: int, chunk_size: int, chunk_count: int, index: int) -> int:
    """Expected byte length of the 1-based chunk ``index``.

    Every chunk is ``chunk_size`` long except the last, which holds the
    remainder.
    """
    if index == chunk_count:
        return total_size - chunk_size * (chunk_count - 1)
    return chunk_size


def chunk_name(filename: str, index: int) -> str:
    """File name of chunk ``index``: ``<filename>.<index>.part``."""
    return f"{filename}.{index}{CHUNK_SUFFIX}"


def format_size(size: float, decimal_places: int = 2) -> str:
    """Human-readable byte count (``25.00 MiB``)."""
    for unit in ["B", "KiB", "MiB", "GiB", "TiB", "PiB"]:
        if abs(size) < 1024.0 or unit == "PiB":
            break
        size /= 1024.0
    return f"{size:.{decimal_places}f} {unit}"


def format_duration(seconds: float) -> str:
    """Format seconds as human-readable time (``2h 15m 30s``)."""
    if seconds <= 0:
        return "0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs >= 1 or not parts:
        parts.append(f"{secs:.1f}s" if not parts else f"{int(secs)}s")

    return " ".join(parts)


def validate_buffer_size(buffer_size: int) -> int:
    """Check a streaming buffer size against the 1..MAX_BUFFER_SIZE bounds."""
    if not 1 <= buffer_size <= MAX_BUFFER_SIZE:
        raise ConfigurationError(
            f"Buffer size must be between 1 and {MAX_BUFFER_SIZE} bytes, got {buffer_size}",
            buffer_size=buffer_size
        )
    return buffer_size
