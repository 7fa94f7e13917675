"""
Blob Storage Backend

In-memory container store with a marker-paginated listing, used as a local
stand-in for a blob service.

Author: Ayodele Oladeji
Date: 2025
"""

import asyncio
import hashlib
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .exceptions import (
    BlobNotFoundError,
    ContainerAlreadyExistsError,
    ContainerNotFoundError,
    InvalidContainerNameError,
)
from .models import (
    Blob,
    BlobProperties,
    BlobSegment,
    Container,
    ContainerNameValidator,
    ContinuationToken,
)


class ContainerBackend:
    """
    In-memory storage backend for containers and blobs.

    Thread-safe using asyncio locks.
    """

    def __init__(self):
        """Initialize the container backend."""
        self._containers: Dict[str, Container] = {}
        self._blobs: Dict[str, Dict[str, Blob]] = {}  # container_name -> {blob_name -> Blob}
        self._lock = asyncio.Lock()

    async def create_container(self, name: str) -> Container:
        """
        Create a new container.

        Args:
            name: Container name

        Returns:
            Created container

        Raises:
            InvalidContainerNameError: If name is invalid
            ContainerAlreadyExistsError: If container already exists
        """
        is_valid, error = ContainerNameValidator.validate(name)
        if not is_valid:
            raise InvalidContainerNameError(error)

        async with self._lock:
            if name in self._containers:
                raise ContainerAlreadyExistsError(f"Container '{name}' already exists")

            container = Container(name=name, etag=self._generate_etag())
            self._containers[name] = container
            self._blobs[name] = {}
            return container

    async def delete_container(self, name: str) -> None:
        """
        Delete a container and all of its blobs.

        Raises:
            ContainerNotFoundError: If container not found
        """
        async with self._lock:
            if name not in self._containers:
                raise ContainerNotFoundError(f"Container '{name}' not found")

            del self._containers[name]
            self._blobs.pop(name, None)

    async def container_exists(self, name: str) -> bool:
        async with self._lock:
            return name in self._containers

    async def reset(self) -> None:
        """Reset the backend, removing all containers and blobs."""
        async with self._lock:
            self._containers.clear()
            self._blobs.clear()

    def _generate_etag(self) -> str:
        """Generate a unique ETag."""
        return hashlib.md5(uuid.uuid4().bytes).hexdigest()

    # ============================================================================
    # Blob Operations
    # ============================================================================

    async def put_blob(
        self,
        container_name: str,
        blob_name: str,
        content: bytes = b"",
        content_type: str = "application/octet-stream",
    ) -> Blob:
        """
        Upload a blob with content, replacing any existing blob of that name.

        Args:
            container_name: Container name
            blob_name: Blob name
            content: Blob content bytes
            content_type: Content type

        Returns:
            Created or updated blob

        Raises:
            ContainerNotFoundError: If container not found
        """
        async with self._lock:
            if container_name not in self._containers:
                raise ContainerNotFoundError(f"Container '{container_name}' not found")

            properties = BlobProperties(
                etag=self._generate_etag(),
                last_modified=datetime.now(timezone.utc),
                content_length=len(content),
                content_type=content_type,
            )
            blob = Blob(
                name=blob_name,
                container_name=container_name,
                content=content,
                properties=properties,
            )

            self._blobs[container_name][blob_name] = blob
            return blob

    async def delete_blob(self, container_name: str, blob_name: str) -> None:
        """
        Delete a blob.

        Raises:
            ContainerNotFoundError: If container not found
            BlobNotFoundError: If blob not found
        """
        async with self._lock:
            if container_name not in self._containers:
                raise ContainerNotFoundError(f"Container '{container_name}' not found")

            if blob_name not in self._blobs[container_name]:
                raise BlobNotFoundError(f"Blob '{blob_name}' not found in container '{container_name}'")

            del self._blobs[container_name][blob_name]

    async def list_blobs(
        self,
        container_name: str,
        prefix: Optional[str] = None,
        max_results: Optional[int] = None,
        marker: Optional[str] = None,
    ) -> tuple[List[Blob], Optional[str]]:
        """
        List blobs in a container.

        Args:
            container_name: Container name
            prefix: Optional prefix filter
            max_results: Optional maximum number of results
            marker: Optional continuation marker, listing resumes after this name

        Returns:
            Tuple of (list of blobs, next_marker)

        Raises:
            ContainerNotFoundError: If container not found
        """
        async with self._lock:
            if container_name not in self._containers:
                raise ContainerNotFoundError(f"Container '{container_name}' not found")

            blobs = list(self._blobs[container_name].values())

            if prefix:
                blobs = [b for b in blobs if b.name.startswith(prefix)]

            blobs.sort(key=lambda b: b.name)

            if marker:
                blobs = [b for b in blobs if b.name > marker]

            next_marker = None
            if max_results and len(blobs) > max_results:
                next_marker = blobs[max_results - 1].name
                blobs = blobs[:max_results]

            return blobs, next_marker

    def get_container_client(self, container_name: str) -> "InMemoryBlobContainer":
        """Get a listing client bound to one container."""
        return InMemoryBlobContainer(self, container_name)


class InMemoryBlobContainer:
    """Segment listing over one container of a ContainerBackend."""

    def __init__(self, backend: ContainerBackend, container_name: str):
        self._backend = backend
        self.container_name = container_name

    async def list_segment(
        self,
        prefix: Optional[str],
        continuation_token: Optional[ContinuationToken],
        page_size: int,
    ) -> BlobSegment:
        blobs, next_marker = await self._backend.list_blobs(
            self.container_name,
            prefix=prefix,
            max_results=page_size,
            marker=continuation_token.next_marker if continuation_token else None,
        )
        return BlobSegment(
            names=[b.name for b in blobs],
            continuation_token=ContinuationToken(next_marker=next_marker) if next_marker else None,
        )
