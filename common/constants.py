"""Project-wide constants (chunk sizing, document limits, exit codes)."""

DEFAULT_CHUNK_SIZE: int = 256 * 1024  # 256 KiB default chunk size

MAX_DOCUMENT_SIZE: int = 16 * 1024 * 1024  # largest document the store accepts
CHUNK_ENVELOPE_RESERVE: int = 16 * 1024  # room for the chunk document's own fields
MAX_CHUNK_SIZE: int = MAX_DOCUMENT_SIZE - CHUNK_ENVELOPE_RESERVE

DEFAULT_NAMESPACE: str = "fs"

STDIO_PATH: str = "-"

EXIT_OK: int = 0
EXIT_USAGE: int = -1
EXIT_NOT_FOUND: int = -2
EXIT_INVALID_CHUNK_SIZE: int = -3
EXIT_CORRUPT_OBJECT: int = -4
EXIT_STORE_UNAVAILABLE: int = -5
EXIT_LOCAL_IO: int = -6
