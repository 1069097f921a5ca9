"""Split large files into verified chunks and merge them back."""

__version__ = "0.5.0"
