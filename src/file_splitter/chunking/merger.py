"""Merge verified chunks back into the original file."""

import hmac
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional

from file_splitter.common import OutputExistsError, new_digest, to_hex

from .progress import ProgressCallback
from .sizes import MAX_BUFFER_SIZE, validate_buffer_size
from .summary import SummaryRecord

logger = logging.getLogger(__name__)

# confirm(prompt) -> True to continue past a mismatch, False to abort
ConfirmCallback = Callable[[str], bool]


class MismatchKind(Enum):
    """What disagreed with the summary record."""
    SIZE = "size"
    CHECKSUM = "checksum"


@dataclass
class ChunkMismatch:
    """A recoverable disagreement between a chunk and the summary."""
    index: int
    kind: MismatchKind
    expected: str
    actual: str
    accepted: bool = False


@dataclass
class MergeReport:
    """Outcome of a merge run."""
    output_path: Path
    bytes_written: int = 0
    chunks_merged: int = 0
    mismatches: List[ChunkMismatch] = field(default_factory=list)
    whole_file_checksum: bytes = b""
    whole_file_match: Optional[bool] = None
    aborted: bool = False
    aborted_at: Optional[int] = None  # chunk index where the user declined

    @property
    def ok(self) -> bool:
        """True if the merge finished with no mismatch of any kind."""
        return not self.aborted and not self.mismatches and bool(self.whole_file_match)

    @property
    def whole_file_checksum_hex(self) -> str:
        return to_hex(self.whole_file_checksum)

    def mismatched_indices(self, kind: Optional[MismatchKind] = None) -> List[int]:
        """Chunk indices with mismatches, optionally filtered by kind."""
        return [m.index for m in self.mismatches if kind is None or m.kind == kind]


class ChunkMerger:
    """Reassembles chunks listed in a summary record."""

    def __init__(
        self,
        summary: SummaryRecord,
        chunk_dir: Path,
        output_dir: Path,
        confirm_on_mismatch: ConfirmCallback,
        buffer_size: int = MAX_BUFFER_SIZE
    ):
        """Initialize merger.

        The summary must already have passed ``check_for_errors(chunk_dir)``.

        Args:
            summary: Summary record of the split
            chunk_dir: Directory holding the chunk files
            output_dir: Directory to write the reconstructed file to
            confirm_on_mismatch: Asked whether to continue after a size or
                checksum mismatch
            buffer_size: Bytes copied per read, capped at MAX_BUFFER_SIZE
        """
        self.summary = summary
        self.chunk_dir = Path(chunk_dir)
        self.output_dir = Path(output_dir)
        self.confirm_on_mismatch = confirm_on_mismatch
        self.buffer_size = validate_buffer_size(buffer_size)

    @property
    def output_path(self) -> Path:
        return self.output_dir / self.summary.filename

    def merge(self, progress_callback: Optional[ProgressCallback] = None) -> MergeReport:
        """Merge all chunks in ascending order into the output file.

        Size and checksum mismatches are reported and confirmed through
        ``confirm_on_mismatch``; declining stops the merge and leaves the
        bytes written so far on disk. A whole-file checksum mismatch is
        only reported.

        Args:
            progress_callback: Optional callback(bytes_done, total, chunk_name)
                invoked after each chunk

        Returns:
            Merge report

        Raises:
            OutputExistsError: If the output file already exists
            OSError: If a chunk cannot be read or the output cannot be written
        """
        summary = self.summary
        report = MergeReport(output_path=self.output_path)

        logger.info(f"Merging {summary.chunk_count} chunk(s) from {self.chunk_dir} into {self.output_path}")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        try:
            output = open(self.output_path, 'xb')
        except FileExistsError as e:
            raise OutputExistsError(
                f"Output file already exists: {self.output_path}", path=str(self.output_path)
            ) from e

        whole_digest = new_digest()

        with output:
            for index in range(1, summary.chunk_count + 1):
                if not self._merge_chunk(index, output, whole_digest, report):
                    report.aborted = True
                    report.aborted_at = index
                    output.flush()
                    logger.warning(
                        f"Merge aborted at chunk #{index}; {report.bytes_written} bytes "
                        f"left in {self.output_path}"
                    )
                    return report

                report.chunks_merged += 1
                if progress_callback:
                    progress_callback(report.bytes_written, summary.total_size, summary.chunk_name(index))

            output.flush()

        report.whole_file_checksum = whole_digest.digest()
        report.whole_file_match = hmac.compare_digest(report.whole_file_checksum, summary.whole_file_checksum)

        if report.whole_file_match:
            logger.info(f"Merge complete: {self.output_path} sha256={report.whole_file_checksum_hex}")
        else:
            logger.warning(
                f"Final merged file checksum mismatch, file is most likely corrupted! "
                f"Expected {summary.whole_file_checksum_hex}, got {report.whole_file_checksum_hex}"
            )

        return report

    def _merge_chunk(
        self,
        index: int,
        output: BinaryIO,
        whole_digest,
        report: MergeReport
    ) -> bool:
        """Append one chunk to the output.

        Returns:
            False if the user declined to continue past a mismatch
        """
        summary = self.summary
        chunk_path = summary.chunk_path(self.chunk_dir, index)
        expected_size = summary.expected_chunk_size(index)
        actual_size = chunk_path.stat().st_size

        if actual_size != expected_size:
            if not self._handle_mismatch(
                report,
                ChunkMismatch(index, MismatchKind.SIZE, str(expected_size), str(actual_size)),
                f"Chunk #{index} has a size of {actual_size} B instead of the expected {expected_size} B"
            ):
                return False

        chunk_digest = new_digest()
        with open(chunk_path, 'rb') as chunk:
            while data := chunk.read(self.buffer_size):
                output.write(data)
                chunk_digest.update(data)
                whole_digest.update(data)
                report.bytes_written += len(data)

        actual = chunk_digest.digest()
        expected = summary.get_chunk_checksum(index) or b""
        logger.debug(f"Merged chunk #{index}/{summary.chunk_count}: {chunk_path} sha256={to_hex(actual)}")

        if not hmac.compare_digest(actual, expected):
            if not self._handle_mismatch(
                report,
                ChunkMismatch(index, MismatchKind.CHECKSUM, to_hex(expected), to_hex(actual)),
                f"Checksum mismatch on chunk #{index}, chunk most likely corrupted! "
                f"Expected {to_hex(expected)}, got {to_hex(actual)}"
            ):
                return False

        return True

    def _handle_mismatch(self, report: MergeReport, mismatch: ChunkMismatch, message: str) -> bool:
        """Report a mismatch and ask whether to continue."""
        logger.warning(message)
        report.mismatches.append(mismatch)

        mismatch.accepted = bool(self.confirm_on_mismatch(f"{message}. Continue anyway?"))
        if mismatch.accepted:
            logger.info(f"Continuing past {mismatch.kind.value} mismatch on chunk #{mismatch.index}")
        return mismatch.accepted


def merge(
    summary: SummaryRecord,
    chunk_dir: Path,
    output_dir: Path,
    confirm_on_mismatch: ConfirmCallback,
    buffer_size: int = MAX_BUFFER_SIZE,
    progress_callback: Optional[ProgressCallback] = None
) -> MergeReport:
    """Merge the chunks of ``summary`` from ``chunk_dir`` into ``output_dir``.

    Convenience wrapper around ChunkMerger.
    """
    merger = ChunkMerger(summary, chunk_dir, output_dir, confirm_on_mismatch, buffer_size=buffer_size)
    return merger.merge(progress_callback=progress_callback)
