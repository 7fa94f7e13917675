"""
blobdelta: bounded, resumable enumeration of blob container listings.
"""

__version__ = "0.1.0"
__author__ = "Ayodele Oladeji"

from .blob.enumerable import BlobContainerEnumerable, BlobContainerEnumerator
from .blob.models import BlobAndContinuationToken, ContinuationToken

__all__ = [
    "BlobContainerEnumerable",
    "BlobContainerEnumerator",
    "BlobAndContinuationToken",
    "ContinuationToken",
    "__version__",
]
