"""
Blob Service Listing Client

Async HTTP client for the Azure Blob Storage List Blobs operation.

Author: Ayodele Oladeji
Date: 2025
"""

import logging
import uuid
import xml.etree.ElementTree as ET
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

import httpx

from ..core.config_manager import ClientConfig
from ..core.logging_config import get_correlation_id, log_with_context, redact
from .exceptions import BlobServiceError, ContainerNotFoundError, InvalidConfigurationError
from .models import BlobSegment, ContinuationToken

logger = logging.getLogger(__name__)


class BlobContainerClient:
    """
    Lists blobs of one container through the blob service REST API.

    The container URL may carry a SAS query string, which is sent with every
    request. No other authentication is performed.
    """

    def __init__(
        self,
        container_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        api_version: str = "2021-08-06",
    ):
        """
        Initialize the client.

        Args:
            container_url: Container endpoint, optionally with a SAS query string
            http_client: Client to send requests with; one is created and owned if omitted
            timeout: Request timeout in seconds for an owned client
            api_version: Value of the x-ms-version header
        """
        self.container_url = container_url
        self.api_version = api_version
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        container_name: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "BlobContainerClient":
        """
        Create a client for a container of the configured account.

        Raises:
            InvalidConfigurationError: If no account URL is configured
        """
        if not config.account_url:
            raise InvalidConfigurationError("client.account_url must be set to list a remote container")

        parts = urlsplit(config.account_url)
        path = parts.path.rstrip("/") + "/" + container_name
        container_url = urlunsplit((parts.scheme, parts.netloc, path, parts.query, ""))

        return cls(
            container_url,
            http_client=http_client,
            timeout=config.timeout,
            api_version=config.api_version,
        )

    async def list_segment(
        self,
        prefix: Optional[str],
        continuation_token: Optional[ContinuationToken],
        page_size: int,
    ) -> BlobSegment:
        """
        Fetch one segment of blob names.

        Args:
            prefix: Optional blob name prefix
            continuation_token: Token from the previous segment, None for the first
            page_size: Maximum names to return

        Returns:
            The segment's names and the token for the next one

        Raises:
            ContainerNotFoundError: If the container does not exist
            BlobServiceError: If the service rejects the request
            httpx.HTTPError: On transport failures
        """
        params = {
            "restype": "container",
            "comp": "list",
            "maxresults": str(page_size),
        }
        if prefix:
            params["prefix"] = prefix
        if continuation_token is not None:
            params["marker"] = continuation_token.next_marker

        # Merged onto the URL so a SAS query in container_url is kept
        url = httpx.URL(self.container_url).copy_merge_params(params)
        request_id = get_correlation_id() or str(uuid.uuid4())

        response = await self._http.get(
            url,
            headers={
                "x-ms-version": self.api_version,
                "x-ms-client-request-id": request_id,
            },
        )
        log_with_context(
            logger,
            logging.DEBUG,
            f"GET {redact(str(url))} -> {response.status_code}",
            client_request_id=request_id,
            service_request_id=response.headers.get("x-ms-request-id"),
        )

        if response.status_code >= 400:
            raise self._error_from_response(response)

        return self._parse_segment(response.content)

    def _parse_segment(self, content: bytes) -> BlobSegment:
        root = ET.fromstring(content)
        names = [name.text or "" for name in root.iterfind("Blobs/Blob/Name")]
        next_marker = root.findtext("NextMarker")

        return BlobSegment(
            names=names,
            continuation_token=ContinuationToken(next_marker=next_marker) if next_marker else None,
        )

    def _error_from_response(self, response: httpx.Response) -> Exception:
        error_code = response.headers.get("x-ms-error-code")
        message = response.reason_phrase

        if response.content:
            try:
                error = ET.fromstring(response.content)
                error_code = error.findtext("Code") or error_code
                message = error.findtext("Message") or message
            except ET.ParseError:
                logger.warning(f"Unparseable error body from blob service ({response.status_code})")

        if response.status_code == 404 and error_code == "ContainerNotFound":
            return ContainerNotFoundError(message)
        return BlobServiceError(response.status_code, error_code, message)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "BlobContainerClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
