"""Data models shared by every content store.

Blob identity is content-derived, so two stores holding the same bytes
report the same ``blob_id`` and ``size``; ``created_at`` is local to the
store that first saw the blob.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .hashing import validate_blob_id


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Permission(str, Enum):
    """Access granted by a signed URL."""
    READ = "read"
    DELETE = "delete"


class BlobProperties(BaseModel):
    """Properties of a stored blob (metadata beyond this lives elsewhere)."""
    model_config = ConfigDict(frozen=True)

    blob_id: str                               # SHA256 hex of the content
    size: int = Field(..., ge=0)               # Size in bytes
    created_at: datetime = Field(default_factory=utc_now)  # First stored in this tier

    @field_validator("blob_id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Reject identifiers that are not SHA256 hex."""
        return validate_blob_id(v)

    @field_validator("created_at")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class ByteRange(BaseModel):
    """Inclusive byte range, as in an HTTP Range header."""
    model_config = ConfigDict(frozen=True)

    start: int = Field(0, ge=0)
    end: Optional[int] = None  # Inclusive; None reads to the end

    @model_validator(mode="after")
    def validate_bounds(self):
        """Ensure end does not precede start."""
        if self.end is not None and self.end < self.start:
            raise ValueError(f"Range end {self.end} precedes start {self.start}")
        return self


class FetchResult(BaseModel):
    """Blob content together with the properties of the serving store."""
    model_config = ConfigDict(frozen=True)

    content: bytes
    properties: BlobProperties


class ListBlobsResult(BaseModel):
    """One page of a blob listing."""
    blobs: List[BlobProperties] = Field(default_factory=list)
    continuation_token: Optional[str] = None  # BlobId of the last item when more pages exist


def paginate(
    blobs: List[BlobProperties],
    max_results: Optional[int] = None,
    continuation_token: Optional[str] = None,
) -> ListBlobsResult:
    """
    Cut one page out of a list already sorted by blob_id.

    The token is the blob_id of the last item of the previous page. An
    unknown token restarts from the beginning instead of failing.

    Args:
        blobs: Blob properties sorted ascending by blob_id
        max_results: Page size (None returns everything after the token)
        continuation_token: blob_id after which the page starts

    Returns:
        ListBlobsResult with a token only when more items follow
    """
    start = 0
    if continuation_token:
        for idx, blob in enumerate(blobs):
            if blob.blob_id == continuation_token:
                start = idx + 1
                break

    limit = len(blobs) if max_results is None else max(max_results, 0)
    end = min(start + limit, len(blobs))
    page = blobs[start:end]

    token = page[-1].blob_id if end < len(blobs) and page else None
    return ListBlobsResult(blobs=page, continuation_token=token)
