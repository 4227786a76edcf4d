"""Repository for the ``<namespace>.files`` collection."""

from typing import Iterator, List, Optional

from common.logging_config import get_logger
from gridstore.database import DESCENDING, DocumentStore, Filter, Sort
from gridstore.models import ObjectMetadata

logger = get_logger(__name__)


class FileRepository:
    def __init__(self, store: DocumentStore, collection: str):
        self.store = store
        self.collection = collection

    def ensure_indexes(self) -> None:
        self.store.ensure_index(self.collection, ["filename"])

    def create_file(self, metadata: ObjectMetadata) -> ObjectMetadata:
        logger.debug(f"Creating file record [file_id={metadata.file_id}, filename={metadata.filename}]")
        self.store.insert(self.collection, metadata.to_document())
        return metadata

    def find(self, predicate: Optional[Filter] = None, sort: Optional[Sort] = None) -> Iterator[ObjectMetadata]:
        for document in self.store.query(self.collection, predicate, sort=sort):
            yield ObjectMetadata.from_document(document)

    def get_by_id(self, file_id: str) -> Optional[ObjectMetadata]:
        document = self.store.find_one(self.collection, {"_id": file_id})
        if document is None:
            return None
        return ObjectMetadata.from_document(document)

    def find_latest_by_name(self, filename: str) -> Optional[ObjectMetadata]:
        """
        Return the newest record with exactly this filename.

        Ties on uploadDate go to the lexicographically greatest _id.
        """
        document = self.store.find_one(
            self.collection,
            {"filename": filename},
            sort=[("uploadDate", DESCENDING), ("_id", DESCENDING)],
        )
        if document is None:
            return None
        return ObjectMetadata.from_document(document)

    def find_by_name(self, filename: str, exclude_id: Optional[str] = None) -> List[ObjectMetadata]:
        predicate: Filter = {"filename": filename}
        if exclude_id is not None:
            predicate["_id"] = {"$ne": exclude_id}
        return list(self.find(predicate))

    def delete_file(self, file_id: str) -> int:
        removed = self.store.remove(self.collection, {"_id": file_id})
        logger.debug(f"Deleted {removed} file record(s) [file_id={file_id}]")
        return removed
