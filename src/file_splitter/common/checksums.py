"""Checksum utilities for file integrity verification."""

import hashlib
from pathlib import Path

# SHA-256 digest length in bytes
DIGEST_SIZE = 32

# Read size used when hashing a whole file
HASH_READ_SIZE = 1024 * 1024  # 1 MB reads


def new_digest() -> "hashlib._Hash":
    """Return a fresh SHA-256 accumulator.

    Every logical scope (one chunk, one whole file) gets its own
    accumulator; they are never shared or reused.
    """
    return hashlib.sha256()


def compute_sha256(file_path: Path) -> bytes:
    """
    Compute SHA-256 digest of entire file.
    
    Used for:
    - Recomputing a chunk checksum independently of the splitter
    - Verifying a reconstructed file against its summary
    
    Args:
        file_path: Path to the file
        
    Returns:
        32-byte SHA-256 digest
        
    Raises:
        OSError: If file cannot be read
    """
    digest = new_digest()

    with open(file_path, 'rb') as f:
        while chunk := f.read(HASH_READ_SIZE):
            digest.update(chunk)

    return digest.digest()


def compute_sha256_hex(file_path: Path) -> str:
    """Compute SHA-256 digest of entire file as lower-case hex string."""
    return to_hex(compute_sha256(file_path))


def to_hex(digest: bytes) -> str:
    """
    Render a digest for display and comparison logging.
    
    Args:
        digest: Raw digest bytes (may be empty)
        
    Returns:
        Lower-case hex, two characters per byte with leading zeros kept
    """
    return digest.hex()


def from_hex(text: str) -> bytes:
    """
    Parse a hex digest written by to_hex.
    
    Raises:
        ValueError: If text is not valid hex
    """
    return bytes.fromhex(text)
