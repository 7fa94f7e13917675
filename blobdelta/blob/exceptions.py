"""
Blob Listing Exceptions

Error taxonomy for blob listing, enumeration, and the in-memory container store.

Author: Ayodele Oladeji
Date: 2025
"""

from typing import Optional


class BlobDeltaError(Exception):
    """Base exception for all blobdelta errors."""

    pass


class InvalidConfigurationError(BlobDeltaError, ValueError):
    """Raised when an enumerable is constructed with invalid options."""

    pass


class InvalidContainerNameError(BlobDeltaError):
    """Raised when a container name is invalid."""

    pass


class ContainerAlreadyExistsError(BlobDeltaError):
    """Raised when attempting to create a container that already exists."""

    pass


class ContainerNotFoundError(BlobDeltaError):
    """Raised when a container is not found."""

    pass


class BlobNotFoundError(BlobDeltaError):
    """Raised when a blob is not found."""

    pass


class BlobServiceError(BlobDeltaError):
    """
    Raised when the blob service answers a listing request with an error.

    Carries the HTTP status and the service error code from the response body.
    """

    def __init__(self, status_code: int, error_code: Optional[str], message: str):
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        super().__init__(f"{status_code} {error_code or 'UnknownError'}: {message}")
