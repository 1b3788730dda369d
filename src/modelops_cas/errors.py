"""Custom exceptions for modelops-cas.

This module defines typed exceptions for better error handling and clearer
error messages throughout the blob store layers.
"""


class CASError(RuntimeError):
    """Base class for all content-addressable storage errors."""
    pass


# Blob Errors
class BlobNotFoundError(CASError):
    """Blob is absent from a store (or, after reconciliation, from every tier)."""

    def __init__(self, blob_id: str):
        self.blob_id = blob_id
        super().__init__(f"Blob not found: {blob_id}")


class InvalidRangeError(CASError, ValueError):
    """Requested byte range does not fit the blob."""

    def __init__(self, blob_id: str, start: int, end, size: int):
        self.blob_id = blob_id
        self.start = start
        self.end = end
        self.size = size
        end_display = "end" if end is None else str(end)
        super().__init__(
            f"Invalid byte range {start}-{end_display} for blob {blob_id[:12]}... "
            f"({size} bytes)"
        )


# Configuration Errors
class ConfigError(CASError):
    """Base class for configuration errors."""
    pass


class NoReadableStoreError(ConfigError):
    """No tier is configured for reading."""

    def __init__(self):
        super().__init__("No readable store available")


class NoWritableStoreError(ConfigError):
    """No tier is configured for writing."""

    def __init__(self):
        super().__init__("No writable store available")


class InvalidTierConfigError(ConfigError):
    """Tier configuration cannot be turned into a store."""
    pass


# Transport Errors
class TransportError(CASError):
    """Base class for remote-access errors."""
    pass


class PeerNotReadyError(TransportError):
    """Peer socket is not connected."""

    def __init__(self, reason: str = "Peer socket is not connected"):
        super().__init__(reason)


class PeerTimeoutError(TransportError):
    """Remote side did not answer in time."""

    def __init__(self, event: str, timeout: float):
        self.event = event
        self.timeout = timeout
        super().__init__(f"No reply to '{event}' within {timeout:.1f}s")


class UnsupportedEventError(TransportError):
    """Socket event does not map to a store verb."""

    def __init__(self, event: str):
        self.event = event
        super().__init__(f"Event {event} not supported")


def is_not_found(error: BaseException) -> bool:
    """Return True when an error means the blob is absent from a tier."""
    return isinstance(error, BlobNotFoundError)
