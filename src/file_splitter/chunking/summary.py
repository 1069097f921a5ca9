"""Summary record describing one split operation."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from file_splitter.common import DIGEST_SIZE, is_single_segment, to_hex

from .errors import SplitStateError, SummaryConsistencyError
from .sizes import chunk_name, count_chunks, expected_chunk_size

logger = logging.getLogger(__name__)

SUMMARY_SUFFIX = ".sum"


def summary_path_for(directory: Path, filename: str) -> Path:
    """Conventional summary location: ``<directory>/<filename>.sum``."""
    return Path(directory) / f"{filename}{SUMMARY_SUFFIX}"


@dataclass
class SummaryRecord:
    """Manifest of a split: sizes, chunk count and checksums.

    ``chunk_checksums`` maps the 1-based chunk index to its SHA-256
    digest; chunk file names are derived from ``filename`` and the index.
    ``whole_file_checksum`` stays empty until the split finishes.
    """
    total_size: int
    chunk_size: int
    filename: str
    chunk_count: Optional[int] = None
    chunk_checksums: Dict[int, bytes] = field(default_factory=dict)
    whole_file_checksum: bytes = b""

    def __post_init__(self) -> None:
        if self.chunk_count is None:
            self.chunk_count = count_chunks(self.total_size, self.chunk_size)

    def chunk_name(self, index: int) -> str:
        """File name of chunk ``index``."""
        return chunk_name(self.filename, index)

    def chunk_path(self, chunk_dir: Path, index: int) -> Path:
        """Location of chunk ``index`` inside ``chunk_dir``."""
        return Path(chunk_dir) / self.chunk_name(index)

    def expected_chunk_size(self, index: int) -> int:
        """Expected byte length of chunk ``index``."""
        return expected_chunk_size(self.total_size, self.chunk_size, self.chunk_count, index)

    def add_chunk_checksum(self, index: int, checksum: bytes) -> None:
        """Register the digest of a freshly written chunk.

        Raises:
            SplitStateError: If the index is out of range or already recorded
        """
        if not 1 <= index <= self.chunk_count:
            raise SplitStateError(
                f"Chunk index {index} outside 1..{self.chunk_count}",
                index=index, chunk_count=self.chunk_count
            )
        if index in self.chunk_checksums:
            raise SplitStateError(f"Chunk #{index} already has a checksum", index=index)
        self.chunk_checksums[index] = bytes(checksum)

    def get_chunk_checksum(self, index: int) -> Optional[bytes]:
        """Stored digest of chunk ``index``, if any."""
        return self.chunk_checksums.get(index)

    def chunk_checksum_hex(self, index: int) -> str:
        """Stored digest of chunk ``index`` as hex (empty if missing)."""
        return to_hex(self.chunk_checksums.get(index) or b"")

    def set_whole_file_checksum(self, checksum: bytes) -> None:
        """Record the whole-file digest. Allowed exactly once.

        Raises:
            SplitStateError: If the checksum has already been set
        """
        if self.whole_file_checksum:
            raise SplitStateError("Whole-file checksum is already set", filename=self.filename)
        self.whole_file_checksum = bytes(checksum)

    @property
    def whole_file_checksum_hex(self) -> str:
        return to_hex(self.whole_file_checksum)

    @property
    def is_complete(self) -> bool:
        """True once every chunk and the whole file have checksums."""
        return len(self.chunk_checksums) == self.chunk_count and bool(self.whole_file_checksum)

    def check_for_errors(self, chunk_dir: Path) -> None:
        """Check the record for internal consistency before merging.

        Verifies the size arithmetic, the chunk naming, that every chunk has
        a well-formed checksum and that every chunk file exists in
        ``chunk_dir``.

        Args:
            chunk_dir: Directory holding the chunk files

        Raises:
            SummaryConsistencyError: On the first problem found
        """
        if self.total_size <= 0:
            raise SummaryConsistencyError(
                f"Source file size recorded as {self.total_size}, must be positive",
                total_size=self.total_size
            )
        if self.chunk_size <= 0:
            raise SummaryConsistencyError(
                f"Chunk size recorded as {self.chunk_size}, must be positive",
                chunk_size=self.chunk_size
            )

        calculated = count_chunks(self.total_size, self.chunk_size)
        if self.chunk_count != calculated:
            raise SummaryConsistencyError(
                f"Chunk count {self.chunk_count} does not match calculated {calculated}",
                chunk_count=self.chunk_count, calculated=calculated
            )

        if not is_single_segment(self.filename):
            raise SummaryConsistencyError(
                f"Filename {self.filename!r} is not a plain file name",
                filename=self.filename
            )

        for index in self.chunk_checksums:
            if not isinstance(index, int) or not 1 <= index <= self.chunk_count:
                raise SummaryConsistencyError(
                    f"Checksum registered for non-existent chunk {index!r}",
                    index=index
                )

        for index in range(1, self.chunk_count + 1):
            checksum = self.chunk_checksums.get(index)
            if checksum is None:
                raise SummaryConsistencyError(f"Chunk #{index} has no checksum", index=index)
            if len(checksum) != DIGEST_SIZE:
                raise SummaryConsistencyError(
                    f"Chunk #{index} checksum is {len(checksum)} bytes, expected {DIGEST_SIZE}",
                    index=index
                )

            path = self.chunk_path(chunk_dir, index)
            if not path.is_file():
                raise SummaryConsistencyError(f"Chunk file is missing: {path}", path=str(path))

        if len(self.whole_file_checksum) != DIGEST_SIZE:
            raise SummaryConsistencyError(
                f"Whole-file checksum is {len(self.whole_file_checksum)} bytes, expected {DIGEST_SIZE}",
                filename=self.filename
            )

        logger.debug(f"Summary for {self.filename} passed consistency check ({self.chunk_count} chunks)")

    def __str__(self) -> str:
        return (
            f"{self.filename} ({self.total_size} bytes, {self.chunk_count} chunk(s) "
            f"of {self.chunk_size} bytes)"
        )
