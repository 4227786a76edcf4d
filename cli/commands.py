"""Command handler functions for CLI operations."""

import sys
from typing import Callable, Dict, Optional, TextIO, Type

from common.constants import EXIT_OK
from common.local_files import is_stdio, open_for_read, open_for_write
from common.logging_config import get_logger
from cli.constants import HELP_TEXT
from cli.models import (
    CommandRequest,
    DeleteCommand,
    GetCommand,
    HelpCommand,
    ListCommand,
    PutCommand,
    SearchCommand,
)
from cli.utils import format_listing_row, format_metadata
from gridstore.exceptions import ObjectNotFoundError, StoreUnavailableError
from gridstore.gridfs import GridFS

logger = get_logger(__name__)


def _display(rows, out: TextIO) -> int:
    count = 0
    for metadata in rows:
        out.write(format_listing_row(metadata) + "\n")
        count += 1
    return count


def _check_last_error(grid: GridFS) -> None:
    error = grid.get_last_error()
    if error:
        raise StoreUnavailableError(error)


def handle_list(cmd: ListCommand, grid: GridFS, out: TextIO) -> int:
    """
    Handle 'list' command.

    Args:
        cmd: ListCommand with an optional literal prefix
        grid: GridFS to query
        out: Stream for listing rows

    Returns:
        Exit code
    """
    count = _display(grid.catalog.list_prefix(cmd.prefix), out)
    logger.debug(f"List command completed: {count} row(s)")
    return EXIT_OK


def handle_search(cmd: SearchCommand, grid: GridFS, out: TextIO) -> int:
    """
    Handle 'search' command.

    Args:
        cmd: SearchCommand with a pattern to look for anywhere in filenames
        grid: GridFS to query
        out: Stream for listing rows

    Returns:
        Exit code
    """
    count = _display(grid.catalog.search_substring(cmd.pattern), out)
    logger.debug(f"Search command completed: {count} row(s)")
    return EXIT_OK


def handle_get(cmd: GetCommand, grid: GridFS, out: TextIO) -> int:
    """
    Handle 'get' command.

    The destination is opened only after the object is found, so a missing
    object leaves the destination untouched.

    Args:
        cmd: GetCommand with filename and optional local destination
        grid: GridFS to read from
        out: Stream for status messages

    Returns:
        Exit code

    Raises:
        ObjectNotFoundError: If no object has this filename
    """
    logger.info(f"Executing get command: filename={cmd.filename} local={cmd.local}")
    metadata = grid.objects.find_file(cmd.filename)
    if metadata is None:
        raise ObjectNotFoundError("file not found")

    destination = cmd.local or metadata.filename
    with open_for_write(destination) as sink:
        written = grid.objects.write_file(metadata, sink)

    if not is_stdio(destination):
        out.write(f"done write to: {destination}\n")
    logger.debug(f"Get command completed: {written} bytes")
    return EXIT_OK


def handle_put(cmd: PutCommand, grid: GridFS, out: TextIO) -> int:
    """
    Handle 'put' command.

    Args:
        cmd: PutCommand with filename, local source, content type, chunk size and replace flag
        grid: GridFS to write to
        out: Stream for status messages

    Returns:
        Exit code

    Raises:
        InvalidChunkSizeError: If the chunk size is out of bounds; checked before the source is opened
    """
    logger.info(f"Executing put command: filename={cmd.filename} source={cmd.source_path} replace={cmd.replace}")
    chunk_size = grid.objects.validate_chunk_size(cmd.chunk_size)

    with open_for_read(cmd.source_path) as source:
        if cmd.replace:
            result = grid.replacer.store_and_replace(
                source, cmd.filename, content_type=cmd.content_type, chunk_size=chunk_size
            )
            stored, removed = result.stored, result.removed
        else:
            stored = grid.objects.store_file(
                source, cmd.filename, content_type=cmd.content_type, chunk_size=chunk_size
            )
            removed = []

    out.write(f"added file: {format_metadata(stored)}\n")
    for metadata in removed:
        out.write(f"removed file: {format_metadata(metadata)}\n")

    _check_last_error(grid)
    out.write("done!\n")
    logger.debug(f"Put command completed: {stored.length} bytes")
    return EXIT_OK


def handle_delete(cmd: DeleteCommand, grid: GridFS, out: TextIO) -> int:
    """
    Handle 'delete' command.

    Args:
        cmd: DeleteCommand with filename
        grid: GridFS to delete from
        out: Stream for status messages

    Returns:
        Exit code
    """
    logger.info(f"Executing delete command: filename={cmd.filename}")
    removed = grid.objects.remove_file(cmd.filename)
    _check_last_error(grid)
    out.write("done!\n")
    logger.debug(f"Delete command completed: {len(removed)} object(s)")
    return EXIT_OK


def handle_help(cmd: HelpCommand, grid: Optional[GridFS], out: TextIO) -> int:
    out.write(HELP_TEXT)
    return EXIT_OK


HANDLERS: Dict[Type, Callable[..., int]] = {
    ListCommand: handle_list,
    SearchCommand: handle_search,
    GetCommand: handle_get,
    PutCommand: handle_put,
    DeleteCommand: handle_delete,
    HelpCommand: handle_help,
}


def dispatch(cmd: CommandRequest, grid: Optional[GridFS], out: Optional[TextIO] = None) -> int:
    """
    Run the handler registered for the command's type.

    Returns:
        Exit code
    """
    handler = HANDLERS[type(cmd)]
    return handler(cmd, grid, out if out is not None else sys.stdout)
