"""Split a file into numbered, checksummed chunks."""

import logging
from pathlib import Path
from typing import BinaryIO, Optional

from file_splitter.common import (
    ConfigurationError,
    OutputExistsError,
    TruncatedFileError,
    is_single_segment,
    new_digest,
    to_hex,
)

from .errors import SplitStateError
from .progress import ProgressCallback
from .sizes import MAX_BUFFER_SIZE, count_chunks, format_size, validate_buffer_size
from .summary import SummaryRecord

logger = logging.getLogger(__name__)


class FileSplitter:
    """Splits a source file into chunks inside an output directory."""

    def __init__(
        self,
        output_dir: Path,
        chunk_size: int,
        buffer_size: int = MAX_BUFFER_SIZE
    ):
        """Initialize splitter.

        Args:
            output_dir: Directory to write chunk files to (created if absent)
            chunk_size: Maximum bytes per chunk
            buffer_size: Bytes copied per read, capped at MAX_BUFFER_SIZE

        Raises:
            ConfigurationError: If chunk_size or buffer_size is out of range
        """
        if chunk_size <= 0:
            raise ConfigurationError(f"Chunk size must be positive, got {chunk_size}", chunk_size=chunk_size)

        self.output_dir = Path(output_dir)
        self.chunk_size = chunk_size
        self.buffer_size = validate_buffer_size(buffer_size)

    def split(
        self,
        source_path: Path,
        progress_callback: Optional[ProgressCallback] = None
    ) -> SummaryRecord:
        """Split ``source_path`` into ``<name>.<index>.part`` files.

        The source is read once. One digest covers the whole stream and a
        fresh digest covers each chunk.

        Args:
            source_path: File to split
            progress_callback: Optional callback(bytes_done, total, chunk_name)
                invoked after each chunk

        Returns:
            Populated summary record (not yet persisted)

        Raises:
            SplitStateError: If the source is empty or its name is not a plain
                file name
            OutputExistsError: If a chunk file already exists
            TruncatedFileError: If the source shrinks while being read
            OSError: If the source cannot be read or a chunk cannot be written
        """
        source_path = Path(source_path)
        if not is_single_segment(source_path.name):
            raise SplitStateError(
                f"Source name {source_path.name!r} cannot be used as a chunk file prefix",
                path=str(source_path)
            )

        total_size = source_path.stat().st_size
        chunk_count = count_chunks(total_size, self.chunk_size)

        if chunk_count <= 0:
            raise SplitStateError(
                f"Illegal chunk count {chunk_count} for {source_path} ({total_size} bytes)",
                path=str(source_path), total_size=total_size
            )

        record = SummaryRecord(
            total_size=total_size,
            chunk_size=self.chunk_size,
            filename=source_path.name,
            chunk_count=chunk_count
        )

        logger.info(
            f"Splitting {source_path} ({format_size(total_size)}) into {chunk_count} chunk(s) "
            f"of up to {format_size(self.chunk_size)}"
        )

        self.output_dir.mkdir(parents=True, exist_ok=True)

        whole_digest = new_digest()
        bytes_read = 0

        with open(source_path, 'rb') as source:
            for index in range(1, chunk_count + 1):
                size = min(self.chunk_size, total_size - bytes_read)
                chunk_path = record.chunk_path(self.output_dir, index)

                checksum = self._write_chunk(source, chunk_path, size, whole_digest)
                record.add_chunk_checksum(index, checksum)
                bytes_read += size

                logger.debug(
                    f"Wrote chunk #{index}/{chunk_count}: {chunk_path} "
                    f"({size} bytes, sha256={to_hex(checksum)})"
                )
                if progress_callback:
                    progress_callback(bytes_read, total_size, chunk_path.name)

        record.set_whole_file_checksum(whole_digest.digest())

        logger.info(f"Split complete: {record.filename} sha256={record.whole_file_checksum_hex}")
        return record

    def _write_chunk(
        self,
        source: BinaryIO,
        chunk_path: Path,
        size: int,
        whole_digest
    ) -> bytes:
        """Copy ``size`` bytes from ``source`` into a new chunk file.

        Returns:
            SHA-256 digest of the chunk
        """
        chunk_digest = new_digest()
        remaining = size

        try:
            target = open(chunk_path, 'xb')
        except FileExistsError as e:
            raise OutputExistsError(
                f"Chunk file already exists: {chunk_path}", path=str(chunk_path)
            ) from e

        with target:
            while remaining > 0:
                data = source.read(min(self.buffer_size, remaining))
                if not data:
                    raise TruncatedFileError(
                        f"Source ended {remaining} bytes early while writing {chunk_path.name}",
                        path=str(chunk_path), missing_bytes=remaining
                    )
                target.write(data)
                chunk_digest.update(data)
                whole_digest.update(data)
                remaining -= len(data)

            target.flush()

        return chunk_digest.digest()


def split(
    source_path: Path,
    output_dir: Path,
    chunk_size: int,
    buffer_size: int = MAX_BUFFER_SIZE,
    progress_callback: Optional[ProgressCallback] = None
) -> SummaryRecord:
    """Split ``source_path`` into chunks of ``chunk_size`` bytes in ``output_dir``.

    Convenience wrapper around FileSplitter.
    """
    splitter = FileSplitter(output_dir, chunk_size, buffer_size=buffer_size)
    return splitter.split(source_path, progress_callback=progress_callback)
