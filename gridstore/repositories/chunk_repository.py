"""Repository for the ``<namespace>.chunks`` collection."""

from typing import Any, Dict, Iterator, Optional

from common.logging_config import get_logger
from gridstore.database import ASCENDING, DocumentStore
from gridstore.models import Chunk

logger = get_logger(__name__)


class ChunkRepository:
    def __init__(self, store: DocumentStore, collection: str):
        self.store = store
        self.collection = collection

    def ensure_indexes(self) -> None:
        self.store.ensure_index(self.collection, ["files_id", "n"], unique=True)

    def create_chunk(self, chunk: Chunk) -> str:
        chunk_id = self.store.insert(self.collection, chunk.to_document())
        logger.debug(f"Wrote chunk {chunk.n} ({len(chunk.data)} bytes) [file_id={chunk.files_id}]")
        return chunk_id

    def iter_chunks(self, file_id: str) -> Iterator[Chunk]:
        """
        Yield the chunks of one object in ascending sequence order.
        """
        cursor = self.store.query(self.collection, {"files_id": file_id}, sort=[("n", ASCENDING)])
        for document in cursor:
            yield Chunk.from_document(document)

    def count_chunks(self, file_id: str, below: Optional[int] = None) -> int:
        """
        Count the chunks of one object, optionally only those numbered 0 .. below-1.
        """
        predicate: Dict[str, Any] = {"files_id": file_id}
        if below is not None:
            predicate["n"] = {"$gte": 0, "$lt": below}
        return self.store.count(self.collection, predicate)

    def delete_chunks(self, file_id: str) -> int:
        removed = self.store.remove(self.collection, {"files_id": file_id})
        logger.info(f"Deleted {removed} chunks [file_id={file_id}]")
        return removed
