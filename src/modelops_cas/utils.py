"""Utility functions for modelops-cas."""

from datetime import datetime


def humanize_size(size: float) -> str:
    """Convert bytes to human-readable format."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def format_timestamp(value: datetime) -> str:
    """Format a timestamp for display.

    Examples:
        datetime(2025, 8, 26, 2, 51, 17, 317839, tzinfo=utc) -> "2025-08-26 02:51:17"
    """
    return value.strftime("%Y-%m-%d %H:%M:%S")


def short_id(blob_id: str, length: int = 12) -> str:
    """Abbreviate a BlobId for display."""
    return blob_id if len(blob_id) <= length else blob_id[:length] + "..."
