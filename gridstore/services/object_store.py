"""Chunked object storage: split streams into chunk documents and reassemble them."""

from typing import BinaryIO, Iterator, List, Optional, Union

from common.checksum import IncrementalChecksumCalculator
from common.constants import DEFAULT_CHUNK_SIZE, MAX_CHUNK_SIZE
from common.logging_config import get_logger
from gridstore.database import DocumentStore, generate_id
from gridstore.exceptions import CorruptObjectError, InvalidChunkSizeError, ObjectNotFoundError
from gridstore.models import Chunk, ObjectMetadata, utc_now
from gridstore.repositories import ChunkRepository, FileRepository

logger = get_logger(__name__)


def validate_chunk_size(chunk_size: Optional[int], default: int = DEFAULT_CHUNK_SIZE) -> int:
    """
    Resolve a requested chunk size.

    Args:
        chunk_size: Requested size in bytes; None or 0 selects ``default``
        default: Size used when none is requested

    Returns:
        The chunk size to store with

    Raises:
        InvalidChunkSizeError: If the size is negative, or larger than one
            document can hold once the chunk envelope is accounted for
    """
    if chunk_size is None or chunk_size == 0:
        chunk_size = default
    if chunk_size == 0:
        raise InvalidChunkSizeError("Default chunk size must be positive")
    if chunk_size < 0:
        raise InvalidChunkSizeError("Chunk size cannot be negative")
    if chunk_size > MAX_CHUNK_SIZE:
        raise InvalidChunkSizeError(
            f"Chunk size beyond maximum document size ({chunk_size} > {MAX_CHUNK_SIZE})"
        )
    return chunk_size


class ChunkSequence:
    """
    Ordered chunk payloads of one stored object.

    Iterating runs a fresh chunk query, so the sequence as a whole can be
    consumed more than once; each iterator is forward-only.

    Before the first payload is read, chunk counts alone establish that
    exactly the numbers 0 .. num_chunks-1 are stored, so a missing or extra
    chunk fails the read before any data reaches the caller.

    Every chunk is also checked before it is yielded: sequence numbers must run
    0, 1, 2, ... without gaps and every chunk but the last must be exactly
    ``chunk_size`` bytes. After the last chunk the total length and the MD5
    digest must match the metadata. Any violation raises CorruptObjectError.
    """

    def __init__(self, chunks: ChunkRepository, metadata: ObjectMetadata):
        self.chunks = chunks
        self.metadata = metadata

    def _check_layout(self) -> None:
        metadata = self.metadata
        total_chunks = metadata.num_chunks
        in_range = self.chunks.count_chunks(metadata.file_id, below=total_chunks)
        if in_range != total_chunks:
            raise CorruptObjectError(
                f"{metadata.filename} [file_id={metadata.file_id}] is missing "
                f"{total_chunks - in_range} of {total_chunks} chunks"
            )
        stored = self.chunks.count_chunks(metadata.file_id)
        if stored != total_chunks:
            raise CorruptObjectError(
                f"{metadata.filename} [file_id={metadata.file_id}] has more chunks than "
                f"its length of {metadata.length} bytes allows ({stored} > {total_chunks})"
            )

    def __iter__(self) -> Iterator[bytes]:
        metadata = self.metadata
        self._check_layout()
        expected_n = 0
        checksum = IncrementalChecksumCalculator()
        total_chunks = metadata.num_chunks

        for chunk in self.chunks.iter_chunks(metadata.file_id):
            if chunk.n != expected_n:
                raise CorruptObjectError(
                    f"Chunk {expected_n} of {metadata.filename} [file_id={metadata.file_id}] "
                    f"is missing (next stored chunk is {chunk.n})"
                )
            if expected_n >= total_chunks:
                raise CorruptObjectError(
                    f"{metadata.filename} [file_id={metadata.file_id}] has more chunks than "
                    f"its length of {metadata.length} bytes allows"
                )
            is_last = expected_n == total_chunks - 1
            size = len(chunk.data)
            if size > metadata.chunk_size or (not is_last and size != metadata.chunk_size):
                raise CorruptObjectError(
                    f"Chunk {chunk.n} of {metadata.filename} [file_id={metadata.file_id}] "
                    f"has {size} bytes, expected {metadata.chunk_size}"
                )

            checksum.update(chunk.data)
            expected_n += 1
            yield chunk.data

        if expected_n != total_chunks or checksum.bytes_seen != metadata.length:
            raise CorruptObjectError(
                f"{metadata.filename} [file_id={metadata.file_id}] is truncated: "
                f"read {expected_n}/{total_chunks} chunks, {checksum.bytes_seen}/{metadata.length} bytes"
            )
        digest = checksum.finalize()
        if digest != metadata.md5:
            raise CorruptObjectError(
                f"Checksum mismatch for {metadata.filename} [file_id={metadata.file_id}]: "
                f"expected {metadata.md5}, got {digest}"
            )


class ChunkedObjectStore:
    """
    Owns the files and chunks collections of one namespace.

    An object becomes visible only when its metadata record is inserted,
    which happens after every chunk has been written. Chunk writes are not
    grouped in a transaction: a failure part way leaves orphan chunks that
    no filename refers to.
    """

    def __init__(
        self,
        store: DocumentStore,
        namespace: str,
        default_chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.store = store
        self.namespace = namespace
        self.default_chunk_size = default_chunk_size
        self.files = FileRepository(store, f"{namespace}.files")
        self.chunks = ChunkRepository(store, f"{namespace}.chunks")
        self._indexes_ready = False

    def _ensure_indexes(self) -> None:
        if not self._indexes_ready:
            self.files.ensure_indexes()
            self.chunks.ensure_indexes()
            self._indexes_ready = True

    def validate_chunk_size(self, chunk_size: Optional[int]) -> int:
        return validate_chunk_size(chunk_size, default=self.default_chunk_size)

    def store_file(
        self,
        source: BinaryIO,
        filename: str,
        content_type: Optional[str] = None,
        chunk_size: Optional[int] = None,
    ) -> ObjectMetadata:
        """
        Store a byte stream as a new object.

        Args:
            source: Binary stream to read until EOF
            filename: Name to record; other objects may already use it
            content_type: Optional MIME type to record
            chunk_size: Bytes per chunk; None or 0 for the default

        Returns:
            Metadata of the new object

        Raises:
            InvalidChunkSizeError: If chunk_size is out of bounds
            DocumentStoreError: If a chunk or the metadata cannot be written
        """
        chunk_size = self.validate_chunk_size(chunk_size)
        self._ensure_indexes()

        file_id = generate_id()
        checksum = IncrementalChecksumCalculator()
        n = 0

        try:
            while True:
                data = _read_exactly(source, chunk_size)
                if not data:
                    break
                self.chunks.create_chunk(Chunk(files_id=file_id, n=n, data=data))
                checksum.update(data)
                n += 1
        except Exception:
            logger.error(f"Upload of {filename} failed after {n} chunks; chunks of file_id={file_id} are orphaned")
            raise

        metadata = ObjectMetadata(
            file_id=file_id,
            filename=filename,
            length=checksum.bytes_seen,
            chunk_size=chunk_size,
            upload_date=utc_now(),
            md5=checksum.finalize(),
            content_type=content_type or None,
        )
        self.files.create_file(metadata)
        logger.info(f"Stored {filename} [file_id={file_id}]: {metadata.length} bytes in {n} chunks")
        return metadata

    def find_file(self, filename: str) -> Optional[ObjectMetadata]:
        """
        Find the object stored under exactly this filename.

        When several objects share the name, the most recently uploaded one
        wins; equal upload dates fall back to the greatest identity.

        Returns:
            Metadata, or None if no object has this filename
        """
        self._ensure_indexes()
        return self.files.find_latest_by_name(filename)

    def get_file(self, file_id: str) -> ObjectMetadata:
        metadata = self.files.get_by_id(file_id)
        if metadata is None:
            raise ObjectNotFoundError(f"No object with file_id={file_id}")
        return metadata

    def read_file(self, target: Union[str, ObjectMetadata]) -> ChunkSequence:
        """
        Return the chunk payloads of an object, in order, as a lazy sequence.

        Args:
            target: Object identity or its metadata

        Raises:
            ObjectNotFoundError: If an identity is given and no object has it
        """
        metadata = target if isinstance(target, ObjectMetadata) else self.get_file(target)
        return ChunkSequence(self.chunks, metadata)

    def write_file(self, metadata: ObjectMetadata, sink: BinaryIO) -> int:
        """
        Stream an object's content into a binary sink.

        Returns:
            Number of bytes written
        """
        written = 0
        for data in self.read_file(metadata):
            sink.write(data)
            written += len(data)
        logger.info(f"Read {metadata.filename} [file_id={metadata.file_id}]: {written} bytes")
        return written

    def remove_by_id(self, file_id: str) -> None:
        """Delete one object: its chunks first, then its metadata record."""
        self.chunks.delete_chunks(file_id)
        self.files.delete_file(file_id)

    def remove_file(self, filename: str) -> List[ObjectMetadata]:
        """
        Delete every object stored under this filename.

        Returns:
            Metadata of the removed objects (empty if none matched)
        """
        self._ensure_indexes()
        removed = self.files.find_by_name(filename)
        for metadata in removed:
            self.remove_by_id(metadata.file_id)
        logger.info(f"Removed {len(removed)} object(s) named {filename}")
        return removed


def _read_exactly(source: BinaryIO, size: int) -> bytes:
    """
    Read up to ``size`` bytes, looping over short reads from pipes and sockets.

    Returns fewer than ``size`` bytes only at end of stream.
    """
    data = source.read(size)
    if not data or len(data) == size:
        return data
    pieces = [data]
    remaining = size - len(data)
    while remaining > 0:
        piece = source.read(remaining)
        if not piece:
            break
        pieces.append(piece)
        remaining -= len(piece)
    return b"".join(pieces)
