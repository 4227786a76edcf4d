"""Service layer: chunked storage, catalog queries and replacement."""

from gridstore.services.object_store import ChunkSequence, ChunkedObjectStore, validate_chunk_size
from gridstore.services.catalog import ObjectCatalog
from gridstore.services.replace_coordinator import ReplaceCoordinator, ReplaceResult

__all__ = [
    "ChunkSequence",
    "ChunkedObjectStore",
    "ObjectCatalog",
    "ReplaceCoordinator",
    "ReplaceResult",
    "validate_chunk_size",
]
