"""Custom exception classes for the chunked object store."""


class GridStoreError(Exception):
    """
    Base exception class for all object store errors.
    """
    pass


class InvalidChunkSizeError(GridStoreError):
    """
    Raised when a chunk size is negative or would not fit in one document.
    """
    pass


class ObjectNotFoundError(GridStoreError):
    """
    Raised when no stored object carries the requested filename or identity.
    """
    pass


class CorruptObjectError(GridStoreError):
    """
    Raised when an object's chunks cannot be reassembled into its declared
    content: a sequence gap, a short chunk, a length or checksum mismatch.
    """
    pass


class DocumentStoreError(GridStoreError):
    """
    Base class for failures raised by the backing document store.
    """
    pass


class StoreUnavailableError(DocumentStoreError):
    """
    Raised when the backing store cannot be opened or a statement fails.
    """
    pass


class DocumentTooLargeError(DocumentStoreError):
    """
    Raised when an encoded document exceeds the maximum document size.
    """
    pass


class InvalidNamespaceError(DocumentStoreError):
    """
    Raised when a namespace or collection name is not a plain identifier.
    """
    pass


class InvalidQueryError(DocumentStoreError):
    """
    Raised when a query filter uses an unknown operator, an invalid field
    name, or a regular expression that does not compile.
    """
    pass


class DuplicateKeyError(DocumentStoreError):
    """
    Raised when a write violates a unique index or reuses an _id.
    """
    pass
