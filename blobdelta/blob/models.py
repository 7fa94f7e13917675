"""
Blob Listing Models

Pydantic models for continuation tokens, listing segments, enumerator options,
and the containers and blobs held by the in-memory store.

Author: Ayodele Oladeji
Date: 2025
"""

import re
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_PAGE_SIZE = 5000


class ContainerNameValidator:
    """
    Validates Azure Blob Storage container names.

    Rules:
    - 3-63 characters
    - Lowercase letters, numbers, hyphens only
    - Must start and end with letter or number
    - No consecutive hyphens
    """

    PATTERN = re.compile(r'^[a-z0-9]([a-z0-9-]*[a-z0-9])?$')
    MIN_LENGTH = 3
    MAX_LENGTH = 63

    @classmethod
    def validate(cls, name: str) -> tuple[bool, Optional[str]]:
        """
        Validate container name against Azure rules.

        Args:
            name: Container name to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not name:
            return False, "Container name cannot be empty"

        if len(name) < cls.MIN_LENGTH:
            return False, f"Container name must be at least {cls.MIN_LENGTH} characters"

        if len(name) > cls.MAX_LENGTH:
            return False, f"Container name must be at most {cls.MAX_LENGTH} characters"

        if not cls.PATTERN.match(name):
            return False, "Container name must contain only lowercase letters, numbers, and hyphens, and must start/end with letter or number"

        if '--' in name:
            return False, "Container name cannot contain consecutive hyphens"

        return True, None


# ============================================================================
# Listing Models
# ============================================================================


class ContinuationToken(BaseModel):
    """
    Opaque position in a paginated blob listing.

    The marker is produced by the listing service and must be handed back
    unchanged to continue the listing.
    """

    next_marker: str = Field(description="Service-issued continuation marker")

    model_config = ConfigDict(frozen=True)


class BlobSegment(BaseModel):
    """One page of a blob listing."""

    names: List[str] = Field(default_factory=list, description="Blob names in ascending order")
    continuation_token: Optional[ContinuationToken] = Field(
        default=None,
        description="Token for the next page, None when the listing is complete",
    )

    model_config = ConfigDict(frozen=True)


class BlobAndContinuationToken(BaseModel):
    """
    A listed blob name paired with the token of the page it was listed in.

    Passing ``continuation_token`` back as an enumerable's initial token
    resumes the listing at the start of that page.
    """

    blob_name: str
    continuation_token: Optional[ContinuationToken] = None

    model_config = ConfigDict(frozen=True)


class EnumerableOptions(BaseModel):
    """Immutable options of a bounded blob enumeration."""

    initial_continuation_token: Optional[ContinuationToken] = None
    min_blob_name: Optional[str] = Field(default=None, description="Inclusive lower bound")
    max_blob_name: Optional[str] = Field(default=None, description="Exclusive upper bound")
    prefix: Optional[str] = None
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)

    model_config = ConfigDict(frozen=True, strict=True)


# ============================================================================
# Store Models
# ============================================================================


class BlobProperties(BaseModel):
    """Blob properties reported by the in-memory store."""

    etag: str = Field(description="Entity tag for the blob")
    last_modified: datetime = Field(description="Last modified timestamp")
    content_length: int = Field(description="Blob size in bytes")
    content_type: str = Field(default="application/octet-stream")


class Blob(BaseModel):
    """A blob held by the in-memory store."""

    name: str = Field(description="Blob name")
    container_name: str = Field(description="Parent container name")
    content: bytes = Field(default=b"", description="Blob content")
    properties: BlobProperties


class Container(BaseModel):
    """A container held by the in-memory store."""

    name: str = Field(description="Container name")
    etag: str = Field(description="Entity tag for the container")
    last_modified: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate container name."""
        is_valid, error = ContainerNameValidator.validate(v)
        if not is_valid:
            raise ValueError(error)
        return v
