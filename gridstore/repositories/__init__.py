"""Repository layer for data access."""

from gridstore.repositories.file_repository import FileRepository
from gridstore.repositories.chunk_repository import ChunkRepository

__all__ = [
    "FileRepository",
    "ChunkRepository",
]
