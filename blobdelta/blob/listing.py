"""
Blob Listing Protocol

The paginated listing call that blob enumeration is built on.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import BlobSegment, ContinuationToken


@runtime_checkable
class BlobListingContainer(Protocol):
    """
    A container that can list its blob names one segment at a time.

    Implementations return names in ascending ordinal order, at most
    ``page_size`` of them, each starting with ``prefix`` when one is given.
    The returned continuation token is None exactly when no names exist past
    the segment.
    """

    async def list_segment(
        self,
        prefix: Optional[str],
        continuation_token: Optional[ContinuationToken],
        page_size: int,
    ) -> BlobSegment:
        ...
