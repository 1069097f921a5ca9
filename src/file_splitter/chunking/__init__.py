"""Split files into verified chunks and merge them back."""

from .errors import ChunkingError, SplitStateError, SummaryConsistencyError, SummaryFormatError
from .merger import ChunkMerger, ChunkMismatch, MergeReport, MismatchKind, merge
from .sizes import DEFAULT_CHUNK_SIZE, MAX_BUFFER_SIZE, chunk_name, count_chunks, parse_chunk_size
from .splitter import FileSplitter, split
from .summary import SummaryRecord, summary_path_for
from .summary_store import load_summary, store_summary

__all__ = [
    'ChunkingError',
    'SplitStateError',
    'SummaryConsistencyError',
    'SummaryFormatError',
    'ChunkMerger',
    'ChunkMismatch',
    'MergeReport',
    'MismatchKind',
    'merge',
    'DEFAULT_CHUNK_SIZE',
    'MAX_BUFFER_SIZE',
    'chunk_name',
    'count_chunks',
    'parse_chunk_size',
    'FileSplitter',
    'split',
    'SummaryRecord',
    'summary_path_for',
    'load_summary',
    'store_summary',
]
