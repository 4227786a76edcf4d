"""Document store on top of SQLite: collections, JSON documents and filter queries."""

import base64
import json
import re
import sqlite3
import uuid
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Generator, Iterator, List, Optional, Sequence, Tuple

from common.constants import MAX_DOCUMENT_SIZE
from common.logging_config import get_logger
from gridstore import config
from gridstore.exceptions import (
    DocumentTooLargeError,
    DuplicateKeyError,
    InvalidNamespaceError,
    InvalidQueryError,
    StoreUnavailableError,
)

logger = get_logger(__name__)

Document = Dict[str, Any]
Filter = Dict[str, Any]
Sort = Sequence[Tuple[str, int]]

ASCENDING = 1
DESCENDING = -1

_COLLECTION_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$')
_FIELD_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')

_COMPARISONS = {
    "$gte": ">=",
    "$lt": "<",
}


@lru_cache(maxsize=64)
def _compile_pattern(pattern: str) -> "re.Pattern[str]":
    return re.compile(pattern)


def _regexp(pattern: str, value: Any) -> bool:
    """SQLite REGEXP implementation: ``value REGEXP pattern`` calls regexp(pattern, value)."""
    if value is None or not isinstance(value, str):
        return False
    return _compile_pattern(pattern).search(value) is not None


def _to_json(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return {"$binary": base64.b64encode(bytes(value)).decode("ascii")}
    if isinstance(value, dict):
        return {key: _to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    return value


def _from_json(obj: Dict[str, Any]) -> Any:
    if len(obj) == 1 and "$binary" in obj:
        return base64.b64decode(obj["$binary"])
    return obj


def encode_document(document: Document) -> str:
    """
    Encode a document as compact JSON; binary values use {"$binary": <base64>}.
    """
    return json.dumps(_to_json(document), separators=(",", ":"))


def decode_document(text: str) -> Document:
    """Decode a document produced by encode_document."""
    return json.loads(text, object_hook=_from_json)


def document_size(document: Document) -> int:
    """
    Compute the size a document counts against MAX_DOCUMENT_SIZE.

    Binary values count at their raw length, not their base64 length, so the
    limit means the same thing for a chunk payload as for any other field.
    """
    binary_total = 0

    def strip(value: Any) -> Any:
        nonlocal binary_total
        if isinstance(value, (bytes, bytearray, memoryview)):
            binary_total += len(value)
            return ""
        if isinstance(value, dict):
            return {key: strip(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [strip(item) for item in value]
        return value

    stripped = strip(document)
    return len(json.dumps(stripped, separators=(",", ":")).encode("utf-8")) + binary_total


def validate_collection_name(name: str) -> str:
    if not _COLLECTION_RE.match(name):
        raise InvalidNamespaceError(f"Invalid collection name: {name!r}")
    return name


def _field_expr(field: str) -> str:
    if field == "_id":
        return "_id"
    if not _FIELD_RE.match(field):
        raise InvalidQueryError(f"Invalid field name in query: {field!r}")
    return f"json_extract(doc, '$.{field}')"


def compile_filter(predicate: Optional[Filter]) -> Tuple[str, List[Any]]:
    """
    Translate a filter document into a SQL WHERE clause and parameters.

    Supported forms per field: a literal value (equality), or an operator
    document using $ne, $regex, $gte, $lt. Fields are ANDed.

    Returns:
        (clause, params); clause is "1" when the filter is empty
    """
    if not predicate:
        return "1", []

    clauses = []
    params: List[Any] = []
    for field, condition in predicate.items():
        expr = _field_expr(field)
        if not isinstance(condition, dict):
            if condition is None:
                clauses.append(f"{expr} IS NULL")
            else:
                clauses.append(f"{expr} = ?")
                params.append(condition)
            continue

        for operator, operand in condition.items():
            if operator == "$ne":
                clauses.append(f"{expr} IS NOT ?")
                params.append(operand)
            elif operator == "$regex":
                try:
                    _compile_pattern(operand)
                except (re.error, TypeError) as e:
                    raise InvalidQueryError(f"Invalid regular expression {operand!r}: {e}") from e
                clauses.append(f"{expr} REGEXP ?")
                params.append(operand)
            elif operator in _COMPARISONS:
                clauses.append(f"{expr} {_COMPARISONS[operator]} ?")
                params.append(operand)
            else:
                raise InvalidQueryError(f"Unsupported query operator: {operator}")

    return " AND ".join(clauses), params


def compile_sort(sort: Optional[Sort]) -> str:
    if not sort:
        return "rowid"
    parts = []
    for field, direction in sort:
        parts.append(f"{_field_expr(field)} {'DESC' if direction == DESCENDING else 'ASC'}")
    return ", ".join(parts)


def generate_id() -> str:
    """
    Generate a new document identity.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


@contextmanager
def get_db_connection(database_path: str) -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.

    Connections run in autocommit mode: every statement is its own
    transaction, so each document write is atomic on its own and nothing
    groups writes together.
    """
    try:
        if database_path != ":memory:":
            Path(database_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(database_path, isolation_level=None)
    except (OSError, sqlite3.Error) as e:
        raise StoreUnavailableError(f"Cannot open database {database_path}: {e}") from e

    conn.row_factory = sqlite3.Row
    conn.create_function("REGEXP", 2, _regexp, deterministic=True)
    try:
        yield conn
    finally:
        conn.close()


class DocumentStore:
    """
    Minimal document store: named collections of JSON documents keyed by _id.

    Usage:
        with DocumentStore("/tmp/files.db") as store:
            store.insert("fs.files", {"filename": "a.txt"})
            for doc in store.query("fs.files", {"filename": {"$regex": "^a"}}):
                ...
    """

    def __init__(self, database_path: Optional[str] = None):
        self.database_path = database_path or config.DATABASE_PATH
        self._connection_cm = None
        self._conn: Optional[sqlite3.Connection] = None
        self._collections = set()
        self._last_error: Optional[str] = None

    def open(self) -> "DocumentStore":
        if self._conn is None:
            self._connection_cm = get_db_connection(self.database_path)
            self._conn = self._connection_cm.__enter__()
            logger.debug(f"Opened document store at {self.database_path}")
        return self

    def close(self) -> None:
        if self._connection_cm is not None:
            self._connection_cm.__exit__(None, None, None)
        self._connection_cm = None
        self._conn = None
        self._collections.clear()

    def __enter__(self) -> "DocumentStore":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        self.open()
        try:
            cursor = self._conn.execute(sql, params)
        except sqlite3.IntegrityError as e:
            self._last_error = str(e)
            raise DuplicateKeyError(f"Duplicate key: {e}") from e
        except sqlite3.Error as e:
            self._last_error = str(e)
            logger.error(f"Statement failed: {e}")
            raise StoreUnavailableError(f"Document store error: {e}") from e
        return cursor

    def ensure_collection(self, collection: str) -> None:
        if collection in self._collections:
            return
        validate_collection_name(collection)
        self._execute(
            f'CREATE TABLE IF NOT EXISTS "{collection}" ('
            "_id TEXT PRIMARY KEY, "
            "doc TEXT NOT NULL"
            ")"
        )
        self._collections.add(collection)

    def ensure_index(self, collection: str, fields: Sequence[str], unique: bool = False) -> None:
        """
        Create an index over one or more document fields if it is missing.
        """
        self.ensure_collection(collection)
        index_name = "idx_" + collection.replace(".", "_") + "_" + "_".join(fields)
        exprs = ", ".join(_field_expr(field) for field in fields)
        self._execute(
            f'CREATE {"UNIQUE " if unique else ""}INDEX IF NOT EXISTS "{index_name}" '
            f'ON "{collection}" ({exprs})'
        )

    def insert(self, collection: str, document: Document) -> str:
        """
        Insert one document.

        Args:
            collection: Collection name (e.g., "fs.chunks")
            document: Document to insert; an _id is assigned when missing

        Returns:
            The document's _id

        Raises:
            DocumentTooLargeError: If the document exceeds MAX_DOCUMENT_SIZE
            StoreUnavailableError: If the write fails
        """
        self.ensure_collection(collection)
        if "_id" not in document:
            document = {"_id": generate_id(), **document}

        size = document_size(document)
        if size > MAX_DOCUMENT_SIZE:
            self._last_error = f"document too large ({size} bytes)"
            raise DocumentTooLargeError(
                f"Document of {size} bytes exceeds maximum of {MAX_DOCUMENT_SIZE} bytes"
            )

        self._execute(
            f'INSERT INTO "{collection}" (_id, doc) VALUES (?, ?)',
            (document["_id"], encode_document(document)),
        )
        self._last_error = None
        return document["_id"]

    def query(
        self,
        collection: str,
        predicate: Optional[Filter] = None,
        sort: Optional[Sort] = None,
        limit: Optional[int] = None,
    ) -> Iterator[Document]:
        """
        Run a filter query and return a lazy, forward-only cursor.

        The statement is executed immediately so that store errors surface
        at call time; rows are decoded one at a time as the caller iterates.
        Without a sort, documents come back in insertion order.
        """
        self.ensure_collection(collection)
        clause, params = compile_filter(predicate)
        sql = f'SELECT doc FROM "{collection}" WHERE {clause} ORDER BY {compile_sort(sort)}'
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        cursor = self._execute(sql, params)
        return self._iterate(cursor)

    def _iterate(self, cursor: sqlite3.Cursor) -> Iterator[Document]:
        try:
            for row in cursor:
                yield decode_document(row["doc"])
        except sqlite3.Error as e:
            self._last_error = str(e)
            raise StoreUnavailableError(f"Document store error: {e}") from e
        finally:
            cursor.close()

    def find_one(
        self,
        collection: str,
        predicate: Optional[Filter] = None,
        sort: Optional[Sort] = None,
    ) -> Optional[Document]:
        return next(self.query(collection, predicate, sort=sort, limit=1), None)

    def count(self, collection: str, predicate: Optional[Filter] = None) -> int:
        self.ensure_collection(collection)
        clause, params = compile_filter(predicate)
        row = self._execute(f'SELECT COUNT(*) AS n FROM "{collection}" WHERE {clause}', params).fetchone()
        return row["n"]

    def remove(self, collection: str, predicate: Filter) -> int:
        """
        Delete every document matching the filter.

        Returns:
            Number of documents removed
        """
        self.ensure_collection(collection)
        clause, params = compile_filter(predicate)
        cursor = self._execute(f'DELETE FROM "{collection}" WHERE {clause}', params)
        self._last_error = None
        return cursor.rowcount

    def get_last_error(self) -> Optional[str]:
        """
        Return the error left by the last write, or None if it succeeded.
        """
        return self._last_error
