"""Persist summary records as JSON."""

import json
import logging
from pathlib import Path
from typing import Any, Dict

from file_splitter.common import OutputExistsError, from_hex, from_segments, to_hex, to_segments

from .errors import SummaryFormatError
from .summary import SummaryRecord

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def summary_to_dict(record: SummaryRecord) -> Dict[str, Any]:
    """Convert a record to its JSON document."""
    return {
        'format_version': FORMAT_VERSION,
        'filename': record.filename,
        'total_size': record.total_size,
        'chunk_size': record.chunk_size,
        'chunk_count': record.chunk_count,
        'whole_file_sha256': to_hex(record.whole_file_checksum),
        'chunks': [
            {
                'index': index,
                'path': to_segments(record.chunk_name(index)),
                'sha256': to_hex(checksum),
            }
            for index, checksum in sorted(record.chunk_checksums.items())
        ],
    }


def summary_from_dict(data: Dict[str, Any]) -> SummaryRecord:
    """Rebuild a record from its JSON document.

    Raises:
        SummaryFormatError: If the document is malformed
    """
    if not isinstance(data, dict):
        raise SummaryFormatError("Summary document is not a JSON object")

    version = data.get('format_version')
    if version != FORMAT_VERSION:
        raise SummaryFormatError(f"Unsupported summary format version: {version!r}", version=version)

    try:
        record = SummaryRecord(
            total_size=_require_int(data, 'total_size'),
            chunk_size=_require_int(data, 'chunk_size'),
            filename=str(data['filename']),
            chunk_count=_require_int(data, 'chunk_count'),
            whole_file_checksum=from_hex(data['whole_file_sha256']),
        )

        for entry in data['chunks']:
            index = _require_int(entry, 'index')
            segments = entry['path']
            if not isinstance(segments, list):
                raise SummaryFormatError(f"Chunk #{index} path must be a list of segments", index=index)
            name = str(from_segments(segments))
            if name != record.chunk_name(index):
                raise SummaryFormatError(
                    f"Chunk #{index} path {name!r} does not match expected {record.chunk_name(index)!r}",
                    index=index
                )
            if index in record.chunk_checksums:
                raise SummaryFormatError(f"Chunk #{index} listed twice", index=index)
            record.chunk_checksums[index] = from_hex(entry['sha256'])
    except (KeyError, TypeError, ValueError) as e:
        raise SummaryFormatError(f"Malformed summary document: {e!r}") from e

    return record


def _require_int(data: Dict[str, Any], key: str) -> int:
    value = data[key]
    # bool is an int subclass but never a valid size
    if isinstance(value, bool) or not isinstance(value, int):
        raise SummaryFormatError(f"Field {key!r} must be an integer, got {value!r}", field=key)
    return value


def store_summary(record: SummaryRecord, path: Path) -> None:
    """Write a summary record to ``path``.

    Args:
        record: Record to persist
        path: Destination file (parent directories are created)

    Raises:
        OutputExistsError: If a summary already exists at ``path``
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        f = open(path, 'x', encoding='utf-8')
    except FileExistsError as e:
        raise OutputExistsError(f"Summary file already exists: {path}", path=str(path)) from e

    with f:
        json.dump(summary_to_dict(record), f, indent=2)

    logger.debug(f"Saved summary for {record.filename} to {path}")


def load_summary(path: Path) -> SummaryRecord:
    """Read a summary record from ``path``.

    Raises:
        OSError: If the file cannot be read
        SummaryFormatError: If the file is not a valid summary
    """
    path = Path(path)

    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SummaryFormatError(f"Summary file {path} is not valid JSON: {e}", path=str(path)) from e

    try:
        record = summary_from_dict(data)
    except SummaryFormatError as e:
        e.context.setdefault('path', str(path))
        raise

    logger.info(f"Loaded summary from {path}: {record}")
    return record
