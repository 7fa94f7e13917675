"""
Blob Container Enumeration

Bounded, resumable enumeration of blob names over a paginated container listing.

A ``BlobContainerEnumerable`` holds the immutable options of an enumeration.
Each call to ``get_enumerator`` (or ``async for``) creates an independent
``BlobContainerEnumerator`` that fetches one segment at a time, filters it
against the name bounds, and hands out names one by one.

Author: Ayodele Oladeji
Date: 2025
"""

import logging
import uuid
from collections import deque
from typing import Deque, List, Optional

from pydantic import ValidationError

from ..core.config_manager import ListingConfig
from ..core.logging_config import correlation_scope, get_correlation_id, log_with_context
from .exceptions import InvalidConfigurationError
from .listing import BlobListingContainer
from .models import (
    DEFAULT_PAGE_SIZE,
    BlobAndContinuationToken,
    ContinuationToken,
    EnumerableOptions,
)

logger = logging.getLogger(__name__)


class BlobContainerEnumerable:
    """
    Lazy sequence of blob names in a container.

    Names satisfy ``min_blob_name <= name < max_blob_name`` and start with
    ``prefix``. Enumeration starts at ``initial_continuation_token`` when one
    is given, which should be a token captured from ``current`` of an earlier
    enumerator over the same prefix. Consistency between a resumed token and
    ``min_blob_name`` is not checked.
    """

    def __init__(
        self,
        container: BlobListingContainer,
        initial_continuation_token: Optional[ContinuationToken] = None,
        min_blob_name: Optional[str] = None,
        max_blob_name: Optional[str] = None,
        prefix: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        """
        Initialize the enumerable.

        Args:
            container: Listing collaborator answering segment requests
            initial_continuation_token: Token to resume from, None to start at the beginning
            min_blob_name: Inclusive lower bound on blob names
            max_blob_name: Exclusive upper bound on blob names
            prefix: Prefix passed through to the listing call
            page_size: Maximum names requested per segment

        Raises:
            InvalidConfigurationError: If the options are invalid
        """
        try:
            self._options = EnumerableOptions(
                initial_continuation_token=initial_continuation_token,
                min_blob_name=min_blob_name,
                max_blob_name=max_blob_name,
                prefix=prefix,
                page_size=page_size,
            )
        except ValidationError as e:
            raise InvalidConfigurationError(f"Invalid enumeration options: {e}") from e

        self._container = container

    @classmethod
    def from_config(
        cls,
        container: BlobListingContainer,
        listing_config: ListingConfig,
        initial_continuation_token: Optional[ContinuationToken] = None,
        min_blob_name: Optional[str] = None,
        max_blob_name: Optional[str] = None,
        prefix: Optional[str] = None,
    ) -> "BlobContainerEnumerable":
        """Create an enumerable using the configured page size."""
        return cls(
            container,
            initial_continuation_token=initial_continuation_token,
            min_blob_name=min_blob_name,
            max_blob_name=max_blob_name,
            prefix=prefix,
            page_size=listing_config.page_size,
        )

    @property
    def options(self) -> EnumerableOptions:
        return self._options

    def get_enumerator(self) -> "BlobContainerEnumerator":
        """Create a new enumerator positioned before the first name."""
        return BlobContainerEnumerator(self._container, self._options)

    def __aiter__(self) -> "BlobContainerEnumerator":
        return self.get_enumerator()

    async def to_list(self) -> List[BlobAndContinuationToken]:
        """Enumerate every name into a list."""
        return await self.get_enumerator().to_list()


class BlobContainerEnumerator:
    """
    Single-pass cursor over a bounded blob listing.

    ``move_next`` is the only operation that can wait on the listing service.
    The cursor keeps no lock, so one enumerator must not be advanced by
    concurrent tasks. Separate enumerators share no state.
    """

    def __init__(self, container: BlobListingContainer, options: EnumerableOptions):
        self._container = container
        self._options = options
        self._continuation_token: Optional[ContinuationToken] = options.initial_continuation_token
        self._segment_token: Optional[ContinuationToken] = None
        self._buffer: Deque[str] = deque()
        self._finished = False
        self._current: Optional[BlobAndContinuationToken] = None
        # Shared by every listing request of this enumerator
        self.enumeration_id = get_correlation_id() or uuid.uuid4().hex

    @property
    def current(self) -> Optional[BlobAndContinuationToken]:
        """The last name produced, with the token of the segment it came from."""
        return self._current

    @property
    def finished(self) -> bool:
        """True once no more segments will be fetched."""
        return self._finished

    async def move_next(self) -> bool:
        """
        Advance to the next blob name.

        Fetches segments from the container until a name passes the bounds or
        the listing is exhausted.

        Returns:
            True if ``current`` holds a new name, False at the end of the sequence

        Raises:
            Any error raised by the container's ``list_segment``
        """
        while not self._buffer:
            if self._finished:
                return False
            await self._fetch_segment()

        self._current = BlobAndContinuationToken(
            blob_name=self._buffer.popleft(),
            continuation_token=self._segment_token,
        )
        return True

    async def skip(self, count: int) -> int:
        """
        Advance past up to ``count`` names.

        Returns:
            Number of names skipped
        """
        skipped = 0
        while skipped < count and await self.move_next():
            skipped += 1
        return skipped

    async def to_list(self) -> List[BlobAndContinuationToken]:
        """Drain the remaining names into a list."""
        items = []
        while await self.move_next():
            items.append(self._current)
        return items

    def __aiter__(self) -> "BlobContainerEnumerator":
        return self

    async def __anext__(self) -> BlobAndContinuationToken:
        if await self.move_next():
            return self._current
        raise StopAsyncIteration

    async def _fetch_segment(self) -> None:
        token = self._continuation_token
        log_with_context(
            logger,
            logging.DEBUG,
            "Fetching blob segment",
            enumeration_id=self.enumeration_id,
            prefix=self._options.prefix,
            has_continuation_token=token is not None,
            page_size=self._options.page_size,
        )

        with correlation_scope(self.enumeration_id):
            segment = await self._container.list_segment(
                prefix=self._options.prefix,
                continuation_token=token,
                page_size=self._options.page_size,
            )

        # Cursor state only changes once the fetch has succeeded
        self._segment_token = token
        self._continuation_token = segment.continuation_token
        if segment.continuation_token is None:
            self._finished = True

        self._buffer.extend(self._apply_bounds(segment.names))

    def _apply_bounds(self, names: List[str]) -> List[str]:
        min_blob_name = self._options.min_blob_name
        max_blob_name = self._options.max_blob_name

        accepted = []
        for name in names:
            if min_blob_name is not None and name < min_blob_name:
                continue

            if max_blob_name is not None and name >= max_blob_name:
                # Names are ordered, so nothing later can be in bounds
                logger.debug(f"Reached max blob name '{max_blob_name}' at '{name}', ending enumeration")
                self._finished = True
                break

            accepted.append(name)

        return accepted
