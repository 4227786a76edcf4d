"""Store-then-cleanup replacement of objects that share a filename."""

from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional

from common.logging_config import get_logger
from gridstore.models import ObjectMetadata
from gridstore.services.object_store import ChunkedObjectStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReplaceResult:
    stored: ObjectMetadata
    removed: List[ObjectMetadata] = field(default_factory=list)


class ReplaceCoordinator:
    """
    Keeps only the newest object under a filename.

    The new object is stored first and older same-named objects are removed
    afterwards, so the name never resolves to nothing. The two phases are
    not atomic: if the removal phase fails, the older objects survive next
    to the new one and remain visible under the same name. Concurrent
    replacements of one name are not coordinated.
    """

    def __init__(self, objects: ChunkedObjectStore):
        self.objects = objects

    def store_and_replace(
        self,
        source: BinaryIO,
        filename: str,
        content_type: Optional[str] = None,
        chunk_size: Optional[int] = None,
    ) -> ReplaceResult:
        stored = self.objects.store_file(source, filename, content_type=content_type, chunk_size=chunk_size)

        previous = self.objects.files.find_by_name(filename, exclude_id=stored.file_id)
        removed = []
        try:
            for metadata in previous:
                self.objects.remove_by_id(metadata.file_id)
                removed.append(metadata)
        except Exception:
            logger.warning(
                f"Replace of {filename} stopped after removing {len(removed)}/{len(previous)} "
                f"older object(s); duplicates remain next to file_id={stored.file_id}"
            )
            raise

        logger.info(f"Replaced {len(removed)} older object(s) named {filename} with file_id={stored.file_id}")
        return ReplaceResult(stored=stored, removed=removed)
