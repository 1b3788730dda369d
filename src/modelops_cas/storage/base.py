"""Base protocol for content store implementations."""

from typing import Iterator, Optional, Protocol, runtime_checkable

from ..hashing import Content
from ..models import BlobProperties, ByteRange, FetchResult, ListBlobsResult, Permission


@runtime_checkable
class ContentStore(Protocol):
    """
    Protocol for content-addressable blob stores.

    Blobs are identified by the SHA256 hex digest of their bytes, so storing
    the same content twice yields the same BlobId and never a second copy.
    Every verb that takes a blob_id raises BlobNotFoundError when the blob
    is absent, except exists() which answers False.
    """

    def store(self, content: Content) -> BlobProperties:
        """
        Store content and return its properties.

        Args:
            content: bytes, str (UTF-8), or iterable of byte chunks

        Returns:
            BlobProperties of the stored (or already present) blob
        """
        ...

    def fetch(self, blob_id: str, byte_range: Optional[ByteRange] = None) -> FetchResult:
        """
        Fetch blob content, optionally a byte range of it.

        Args:
            blob_id: BlobId to fetch
            byte_range: Optional inclusive range

        Returns:
            FetchResult with content and properties
        """
        ...

    def fetch_stream(self, blob_id: str) -> Iterator[bytes]:
        """
        Fetch blob content as an iterator of chunks.

        Args:
            blob_id: BlobId to fetch

        Returns:
            Iterator yielding the content in order
        """
        ...

    def exists(self, blob_id: str) -> bool:
        """
        Check if a blob is present.

        Only transport errors are raised; absence is reported as False.
        """
        ...

    def properties(self, blob_id: str) -> BlobProperties:
        """Return blob properties without content."""
        ...

    def delete(self, blob_id: str) -> None:
        """Delete a blob."""
        ...

    def list_blobs(
        self,
        prefix: Optional[str] = None,
        max_results: Optional[int] = None,
        continuation_token: Optional[str] = None,
    ) -> ListBlobsResult:
        """
        List blobs ordered by BlobId.

        Args:
            prefix: Only include BlobIds starting with this prefix
            max_results: Page size
            continuation_token: Token returned by the previous page

        Returns:
            ListBlobsResult with the page and the next token, if any
        """
        ...

    def signed_url(
        self,
        blob_id: str,
        expires_in: int,
        permission: Permission = Permission.READ,
    ) -> str:
        """
        Issue a URL granting temporary access to a blob.

        Args:
            blob_id: BlobId to grant access to
            expires_in: Lifetime in seconds
            permission: Access granted by the URL

        Returns:
            The signed URL
        """
        ...
