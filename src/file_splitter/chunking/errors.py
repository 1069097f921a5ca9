"""Split/merge specific errors."""

from file_splitter.common import FileSplitterError


class ChunkingError(FileSplitterError):
    """Split or merge processing failed."""
    pass


class SplitStateError(ChunkingError):
    """Operation is illegal in the current split state."""
    pass


class SummaryConsistencyError(ChunkingError):
    """Summary record failed its self-consistency check."""
    pass


class SummaryFormatError(ChunkingError):
    """Summary file cannot be parsed."""
    pass
