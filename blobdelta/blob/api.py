"""
Blob Storage API Endpoints

FastAPI List Blobs endpoint serving the in-memory container store with the
Azure Blob Storage XML response format.

Author: Ayodele Oladeji
Date: 2025
"""

from fastapi import APIRouter, Query, Response, status
from typing import Optional
import xml.etree.ElementTree as ET

from .backend import ContainerBackend
from .exceptions import ContainerNotFoundError


API_VERSION = '2021-08-06'

# Initialize backend
backend = ContainerBackend()

# Create router
router = APIRouter(prefix="/blob", tags=["blob-storage"])


def _format_error_xml(code: str, message: str) -> bytes:
    """
    Format an Azure Storage XML error body.

    Args:
        code: Error code
        message: Error message

    Returns:
        UTF-8 encoded XML document
    """
    error = ET.Element("Error")
    ET.SubElement(error, "Code").text = code
    ET.SubElement(error, "Message").text = message
    return ET.tostring(error, encoding='utf-8', xml_declaration=True)


def _error_response(status_code: int, code: str, message: str) -> Response:
    return Response(
        status_code=status_code,
        content=_format_error_xml(code, message),
        media_type="application/xml",
        headers={
            'x-ms-error-code': code,
            'x-ms-version': API_VERSION,
        },
    )


@router.get(
    "/{account_name}/{container_name}",
    status_code=status.HTTP_200_OK,
    summary="List Blobs",
)
async def list_blobs(
    account_name: str,
    container_name: str,
    restype: Optional[str] = Query(None),
    comp: Optional[str] = Query(None),
    prefix: Optional[str] = Query(None),
    maxresults: Optional[str] = Query(None),
    marker: Optional[str] = Query(None),
) -> Response:
    """
    List blobs in a container, one segment per request.

    Azure REST API: GET https://{account}.blob.core.windows.net/{container}?restype=container&comp=list

    Args:
        account_name: Storage account name
        container_name: Container name
        restype: Resource type, must be "container"
        comp: Component, must be "list"
        prefix: Blob name prefix filter
        maxresults: Maximum results in this segment
        marker: Continuation marker from a previous segment

    Returns:
        200 OK with an EnumerationResults XML body

    Raises:
        400 Bad Request: Unsupported operation or invalid maxresults
        404 Not Found: Container not found
    """
    if restype != "container" or comp != "list":
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "UnsupportedQueryParameter",
            "Only List Blobs (restype=container&comp=list) is supported.",
        )

    try:
        max_results = int(maxresults) if maxresults is not None else None
    except ValueError:
        max_results = 0
    if max_results is not None and max_results < 1:
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "InvalidQueryParameterValue",
            f"Value for one of the query parameters specified in the request URI is invalid: maxresults={maxresults}",
        )

    try:
        blobs, next_marker = await backend.list_blobs(
            container_name,
            prefix=prefix,
            max_results=max_results,
            marker=marker,
        )
    except ContainerNotFoundError:
        return _error_response(
            status.HTTP_404_NOT_FOUND,
            "ContainerNotFound",
            "The specified container does not exist.",
        )

    root = ET.Element("EnumerationResults")
    root.set("ServiceEndpoint", f"https://{account_name}.blob.core.windows.net/")
    root.set("ContainerName", container_name)

    if prefix:
        ET.SubElement(root, "Prefix").text = prefix
    if marker:
        ET.SubElement(root, "Marker").text = marker
    if max_results:
        ET.SubElement(root, "MaxResults").text = str(max_results)

    blobs_element = ET.SubElement(root, "Blobs")
    for blob in blobs:
        blob_element = ET.SubElement(blobs_element, "Blob")
        ET.SubElement(blob_element, "Name").text = blob.name

        props = ET.SubElement(blob_element, "Properties")
        ET.SubElement(props, "Content-Length").text = str(blob.properties.content_length)
        ET.SubElement(props, "Content-Type").text = blob.properties.content_type
        ET.SubElement(props, "Etag").text = blob.properties.etag
        ET.SubElement(props, "Last-Modified").text = blob.properties.last_modified.strftime('%a, %d %b %Y %H:%M:%S GMT')

    # Azure always sends NextMarker, empty on the last segment
    ET.SubElement(root, "NextMarker").text = next_marker or ""

    xml_response = ET.tostring(root, encoding='utf-8', xml_declaration=True)

    return Response(
        content=xml_response,
        media_type="application/xml",
        headers={
            'x-ms-request-id': 'blobdelta-request-id',
            'x-ms-version': API_VERSION,
        },
    )
