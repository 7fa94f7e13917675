"""
Unit tests for the in-memory container store.

Tests container lifecycle, blob writes, marker-paginated listing, and the
segment listing client.

Author: Ayodele Oladeji
Date: 2025
"""

import pytest

from blobdelta.blob.backend import ContainerBackend, InMemoryBlobContainer
from blobdelta.blob.exceptions import (
    BlobNotFoundError,
    ContainerAlreadyExistsError,
    ContainerNotFoundError,
    InvalidContainerNameError,
)
from blobdelta.blob.listing import BlobListingContainer
from blobdelta.blob.models import ContinuationToken


@pytest.fixture
def backend():
    """Create a fresh backend for each test."""
    return ContainerBackend()


@pytest.fixture
async def backend_with_container(backend):
    """Create a backend with a test container."""
    await backend.create_container("test-container")
    return backend


class TestContainerOperations:
    """Test container lifecycle."""

    @pytest.mark.asyncio
    async def test_create_container(self, backend):
        """Test creating a container."""
        container = await backend.create_container("test-container")

        assert container.name == "test-container"
        assert container.etag
        assert await backend.container_exists("test-container")

    @pytest.mark.asyncio
    async def test_create_container_already_exists(self, backend_with_container):
        """Test creating a duplicate container."""
        with pytest.raises(ContainerAlreadyExistsError):
            await backend_with_container.create_container("test-container")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["ab", "Upper", "bad--name", "-start", "end-"])
    async def test_create_container_invalid_name(self, backend, name):
        """Test container names are validated."""
        with pytest.raises(InvalidContainerNameError):
            await backend.create_container(name)

    @pytest.mark.asyncio
    async def test_delete_container(self, backend_with_container):
        """Test deleting a container removes its blobs."""
        await backend_with_container.put_blob("test-container", "a")
        await backend_with_container.delete_container("test-container")

        assert not await backend_with_container.container_exists("test-container")
        with pytest.raises(ContainerNotFoundError):
            await backend_with_container.list_blobs("test-container")

    @pytest.mark.asyncio
    async def test_delete_container_not_found(self, backend):
        """Test deleting a missing container."""
        with pytest.raises(ContainerNotFoundError):
            await backend.delete_container("missing")

    @pytest.mark.asyncio
    async def test_reset(self, backend_with_container):
        """Test reset removes everything."""
        await backend_with_container.reset()

        assert not await backend_with_container.container_exists("test-container")


class TestBlobOperations:
    """Test blob writes and deletes."""

    @pytest.mark.asyncio
    async def test_put_blob(self, backend_with_container):
        """Test uploading a blob."""
        blob = await backend_with_container.put_blob("test-container", "test.txt", b"Hello, World!")

        assert blob.name == "test.txt"
        assert blob.container_name == "test-container"
        assert blob.properties.content_length == 13
        assert blob.properties.content_type == "application/octet-stream"

    @pytest.mark.asyncio
    async def test_put_blob_container_not_found(self, backend):
        """Test uploading to a missing container."""
        with pytest.raises(ContainerNotFoundError):
            await backend.put_blob("missing", "test.txt")

    @pytest.mark.asyncio
    async def test_put_blob_overwrites(self, backend_with_container):
        """Test uploading the same name twice keeps one blob."""
        await backend_with_container.put_blob("test-container", "a", b"1")
        await backend_with_container.put_blob("test-container", "a", b"22")

        blobs, _ = await backend_with_container.list_blobs("test-container")
        assert [b.properties.content_length for b in blobs] == [2]

    @pytest.mark.asyncio
    async def test_delete_blob(self, backend_with_container):
        """Test deleting a blob."""
        await backend_with_container.put_blob("test-container", "a")
        await backend_with_container.delete_blob("test-container", "a")

        blobs, _ = await backend_with_container.list_blobs("test-container")
        assert blobs == []

    @pytest.mark.asyncio
    async def test_delete_blob_not_found(self, backend_with_container):
        """Test deleting a missing blob."""
        with pytest.raises(BlobNotFoundError):
            await backend_with_container.delete_blob("test-container", "missing")


class TestListBlobs:
    """Test marker-paginated listing."""

    @pytest.mark.asyncio
    async def test_list_blobs_empty(self, backend_with_container):
        """Test listing an empty container."""
        blobs, marker = await backend_with_container.list_blobs("test-container")

        assert blobs == []
        assert marker is None

    @pytest.mark.asyncio
    async def test_list_blobs_sorted(self, backend_with_container):
        """Test names come back in ordinal order."""
        for name in ["b", "a", "B", "c"]:
            await backend_with_container.put_blob("test-container", name)

        blobs, marker = await backend_with_container.list_blobs("test-container")

        assert [b.name for b in blobs] == ["B", "a", "b", "c"]
        assert marker is None

    @pytest.mark.asyncio
    async def test_list_blobs_with_prefix(self, backend_with_container):
        """Test listing with a prefix."""
        for name in ["docs/a", "docs/b", "img/a"]:
            await backend_with_container.put_blob("test-container", name)

        blobs, _ = await backend_with_container.list_blobs("test-container", prefix="docs/")

        assert [b.name for b in blobs] == ["docs/a", "docs/b"]

    @pytest.mark.asyncio
    async def test_list_blobs_with_max_results(self, backend_with_container):
        """Test max results sets the next marker."""
        for i in range(5):
            await backend_with_container.put_blob("test-container", f"file{i}.txt")

        blobs, marker = await backend_with_container.list_blobs("test-container", max_results=3)

        assert len(blobs) == 3
        assert marker == "file2.txt"

    @pytest.mark.asyncio
    async def test_list_blobs_with_marker(self, backend_with_container):
        """Test the listing resumes after the marker."""
        for i in range(5):
            await backend_with_container.put_blob("test-container", f"file{i}.txt")

        blobs, marker = await backend_with_container.list_blobs(
            "test-container", max_results=3, marker="file2.txt"
        )

        assert [b.name for b in blobs] == ["file3.txt", "file4.txt"]
        assert marker is None

    @pytest.mark.asyncio
    async def test_exact_page_has_no_marker(self, backend_with_container):
        """Test a segment ending exactly at the last blob has no marker."""
        for name in ["a", "b"]:
            await backend_with_container.put_blob("test-container", name)

        _, marker = await backend_with_container.list_blobs("test-container", max_results=2)

        assert marker is None


class TestInMemoryBlobContainer:
    """Test the segment listing client."""

    @pytest.mark.asyncio
    async def test_satisfies_listing_protocol(self, backend_with_container):
        """Test the client is a BlobListingContainer."""
        client = backend_with_container.get_container_client("test-container")

        assert isinstance(client, InMemoryBlobContainer)
        assert isinstance(client, BlobListingContainer)

    @pytest.mark.asyncio
    async def test_list_segment_pages(self, backend_with_container):
        """Test walking segments with continuation tokens."""
        for name in ["a", "b", "c"]:
            await backend_with_container.put_blob("test-container", name)
        client = backend_with_container.get_container_client("test-container")

        first = await client.list_segment(None, None, 2)
        second = await client.list_segment(None, first.continuation_token, 2)

        assert first.names == ["a", "b"]
        assert first.continuation_token == ContinuationToken(next_marker="b")
        assert second.names == ["c"]
        assert second.continuation_token is None

    @pytest.mark.asyncio
    async def test_list_segment_with_prefix(self, backend_with_container):
        """Test segments are narrowed by prefix."""
        for name in ["1/a", "2/a", "2/b"]:
            await backend_with_container.put_blob("test-container", name)
        client = backend_with_container.get_container_client("test-container")

        segment = await client.list_segment("2/", None, 5000)

        assert segment.names == ["2/a", "2/b"]
