"""Hashing utilities for content-derived blob identifiers.

A BlobId is the lowercase SHA256 hex digest of the blob bytes. Unlike the
``sha256:xxxx`` digests used elsewhere in modelops, the scheme prefix is
omitted so that listing prefixes apply directly to the hex.
"""

import hashlib
import re
from pathlib import Path
from typing import Iterable, Tuple, Union

Content = Union[bytes, bytearray, memoryview, str, Iterable[bytes]]

_HEX64 = re.compile(r"^[0-9a-f]{64}$")


def to_bytes(content: Content) -> bytes:
    """Normalize supported content shapes to a single bytes object.

    Strings are UTF-8 encoded. Iterables of chunks are buffered in order.

    Args:
        content: bytes-like object, str, or iterable of byte chunks

    Returns:
        The content as bytes
    """
    if isinstance(content, bytes):
        return content
    if isinstance(content, (bytearray, memoryview)):
        return bytes(content)
    if isinstance(content, str):
        return content.encode("utf-8")
    return b"".join(bytes(chunk) for chunk in content)


def compute_blob_id(content: Content) -> str:
    """Compute the BlobId for a piece of content.

    Args:
        content: bytes, str, or iterable of byte chunks

    Returns:
        64-character lowercase SHA256 hex digest
    """
    sha256 = hashlib.sha256()
    if isinstance(content, (bytes, bytearray, memoryview, str)):
        sha256.update(to_bytes(content))
    else:
        for chunk in content:
            sha256.update(chunk)
    return sha256.hexdigest()


def compute_file_blob_id(path: Path) -> Tuple[str, int]:
    """Compute BlobId and size of a file without loading it whole.

    Args:
        path: File to hash

    Returns:
        Tuple of (blob_id, size_in_bytes)
    """
    sha256 = hashlib.sha256()
    size = 0
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            sha256.update(chunk)
            size += len(chunk)
    return sha256.hexdigest(), size


def validate_blob_id(blob_id: str) -> str:
    """Validate a BlobId string.

    Args:
        blob_id: Candidate identifier

    Returns:
        The identifier unchanged

    Raises:
        ValueError: If not 64 lowercase hex characters
    """
    if not isinstance(blob_id, str) or not _HEX64.fullmatch(blob_id):
        raise ValueError(f"Invalid blob id (must be 64 hex chars): {blob_id!r}")
    return blob_id


def is_blob_id(value: str) -> bool:
    """Check whether a string looks like a BlobId."""
    return isinstance(value, str) and bool(_HEX64.fullmatch(value))


__all__ = [
    "Content",
    "compute_blob_id",
    "compute_file_blob_id",
    "is_blob_id",
    "to_bytes",
    "validate_blob_id",
]
