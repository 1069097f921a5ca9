"""Path utilities for portable path storage."""

from pathlib import Path, PurePath
from typing import List, Sequence


def to_segments(path: Path | str) -> List[str]:
    """
    Decompose a relative path into its segments for storage.
    
    Stored paths never embed a platform separator, so a record written on
    Windows reads back the same on Linux and vice versa.
    
    Args:
        path: Relative path (Path or string)
        
    Returns:
        List of path segments
        
    Examples:
        >>> to_segments("parts/movie.mkv.1.part")
        ['parts', 'movie.mkv.1.part']
    """
    path_str = str(path).replace('\\', '/')
    return [part for part in path_str.split('/') if part and part != '.']


def from_segments(segments: Sequence[str]) -> Path:
    """Rebuild a relative path from stored segments."""
    if not segments:
        raise ValueError("Path has no segments")
    return Path(*segments)


def is_single_segment(name: str) -> bool:
    """Check that a name is a plain file name with no directory part."""
    if not name or name in ('.', '..'):
        return False
    if '/' in name or '\\' in name:
        return False
    return PurePath(name).name == name
