"""Metadata-only listing and searching over the files collection."""

import re
from typing import Iterator, Optional

from common.logging_config import get_logger
from gridstore.database import Filter
from gridstore.models import ObjectMetadata
from gridstore.repositories import FileRepository

logger = get_logger(__name__)


def prefix_filter(prefix: Optional[str]) -> Filter:
    """
    Build a filter matching filenames that start with ``prefix`` literally.

    Regular expression metacharacters in the prefix are escaped, so
    ``a.b*c`` matches only names beginning with those five characters.
    """
    if not prefix:
        return {}
    return {"filename": {"$regex": "^" + re.escape(prefix)}}


def substring_filter(needle: str) -> Filter:
    """
    Build a filter matching filenames that contain ``needle``.

    The needle is used as a regular expression without escaping: plain text
    matches as a substring, and pattern syntax is honoured.
    """
    return {"filename": {"$regex": needle}}


class ObjectCatalog:
    """Lists stored objects by filename; results come back in store order."""

    def __init__(self, files: FileRepository):
        self.files = files

    def list_prefix(self, prefix: Optional[str] = None) -> Iterator[ObjectMetadata]:
        logger.debug(f"Listing objects [prefix={prefix!r}]")
        return self.files.find(prefix_filter(prefix))

    def search_substring(self, needle: str) -> Iterator[ObjectMetadata]:
        if not needle:
            raise ValueError("search needs a non-empty pattern")
        logger.debug(f"Searching objects [pattern={needle!r}]")
        return self.files.find(substring_filter(needle))
