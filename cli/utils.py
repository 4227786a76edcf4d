"""Utility functions for CLI output."""

import json

from gridstore.models import ObjectMetadata


def format_listing_row(metadata: ObjectMetadata) -> str:
    """One row of list/search output: filename, a tab, the length in bytes."""
    return f"{metadata.filename}\t{metadata.length}"


def format_metadata(metadata: ObjectMetadata) -> str:
    """Render a metadata record the way it is stored, as one line of JSON."""
    return json.dumps(metadata.model_dump(mode="json", by_alias=True, exclude_none=True))

