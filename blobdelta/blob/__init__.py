"""
Blob Listing

Bounded blob enumeration over paginated container listings, with in-memory
and HTTP listing backends.

Author: Ayodele Oladeji
Date: 2025
"""

from .backend import ContainerBackend, InMemoryBlobContainer
from .client import BlobContainerClient
from .enumerable import BlobContainerEnumerable, BlobContainerEnumerator
from .exceptions import (
    BlobDeltaError,
    BlobNotFoundError,
    BlobServiceError,
    ContainerAlreadyExistsError,
    ContainerNotFoundError,
    InvalidConfigurationError,
    InvalidContainerNameError,
)
from .listing import BlobListingContainer
from .models import BlobAndContinuationToken, BlobSegment, ContinuationToken, EnumerableOptions

__all__ = [
    "BlobAndContinuationToken",
    "BlobContainerClient",
    "BlobContainerEnumerable",
    "BlobContainerEnumerator",
    "BlobDeltaError",
    "BlobListingContainer",
    "BlobNotFoundError",
    "BlobSegment",
    "BlobServiceError",
    "ContainerAlreadyExistsError",
    "ContainerBackend",
    "ContainerNotFoundError",
    "ContinuationToken",
    "EnumerableOptions",
    "InMemoryBlobContainer",
    "InvalidConfigurationError",
    "InvalidContainerNameError",
]
