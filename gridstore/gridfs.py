"""GridFS facade: one namespace of a document store with its services wired up."""

from typing import Optional

from common.constants import DEFAULT_CHUNK_SIZE
from gridstore import config
from gridstore.database import DocumentStore
from gridstore.services import ChunkedObjectStore, ObjectCatalog, ReplaceCoordinator


class GridFS:
    """
    Bundles the object store, the catalog and the replace coordinator for
    one namespace. The document store is borrowed: the caller opens and
    closes it.
    """

    def __init__(
        self,
        store: DocumentStore,
        namespace: Optional[str] = None,
        default_chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.store = store
        self.namespace = namespace or config.NAMESPACE
        self.objects = ChunkedObjectStore(store, self.namespace, default_chunk_size=default_chunk_size)
        self.catalog = ObjectCatalog(self.objects.files)
        self.replacer = ReplaceCoordinator(self.objects)

    def get_last_error(self) -> Optional[str]:
        return self.store.get_last_error()
