"""CLI entry point."""

import sys
from typing import List, Optional, TextIO

from common.constants import (
    EXIT_CORRUPT_OBJECT,
    EXIT_INVALID_CHUNK_SIZE,
    EXIT_LOCAL_IO,
    EXIT_NOT_FOUND,
    EXIT_STORE_UNAVAILABLE,
    EXIT_USAGE,
)
from common.logging_config import setup_components, get_logger
from cli.commands import dispatch
from cli.config import Config, default_config_path
from cli.constants import USAGE
from cli.models import HelpCommand
from cli.parser import ParseError, parse_command
from gridstore.database import DocumentStore
from gridstore.exceptions import (
    CorruptObjectError,
    DocumentStoreError,
    InvalidChunkSizeError,
    InvalidQueryError,
    ObjectNotFoundError,
)
from gridstore.gridfs import GridFS

LOG_COMPONENTS = ("cli", "common", "gridstore")

# Checked in order; the first matching class decides the exit code.
EXIT_CODES = (
    (InvalidChunkSizeError, EXIT_INVALID_CHUNK_SIZE),
    (ObjectNotFoundError, EXIT_NOT_FOUND),
    (CorruptObjectError, EXIT_CORRUPT_OBJECT),
    (InvalidQueryError, EXIT_USAGE),
    (DocumentStoreError, EXIT_STORE_UNAVAILABLE),
    (OSError, EXIT_LOCAL_IO),
)

HANDLED_ERRORS = tuple(error_class for error_class, _ in EXIT_CODES)

logger = get_logger("cli")


def exit_code_for(error: BaseException) -> int:
    for error_class, code in EXIT_CODES:
        if isinstance(error, error_class):
            return code
    raise error


def main(
    argv: Optional[List[str]] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
    config: Optional[Config] = None,
) -> int:
    """
    Run one files command.

    Args:
        argv: Arguments without the program name; defaults to sys.argv[1:]
        stdout: Stream for command output; defaults to sys.stdout
        stderr: Stream for errors and usage; defaults to sys.stderr
        config: Loaded configuration; defaults to the file from default_config_path()

    Returns:
        Exit code: 0, or one of the negative EXIT_* codes
    """
    args = sys.argv[1:] if argv is None else list(argv)
    out = stdout if stdout is not None else sys.stdout
    err = stderr if stderr is not None else sys.stderr

    try:
        invocation = parse_command(args)
    except ParseError as e:
        err.write(f"ERROR: {e}\n\n")
        err.write(USAGE)
        return EXIT_USAGE

    if isinstance(invocation.command, HelpCommand):
        return dispatch(invocation.command, None, out)

    options = invocation.options
    if config is None:
        config = Config(default_config_path())

    log_level = 'DEBUG' if options.debug else config.get_log_level()
    setup_components(LOG_COMPONENTS, log_level=log_level)
    if options.debug:
        logger.debug("Debug logging enabled")

    database_path = options.database_path or config.get_database_path()
    namespace = options.namespace or config.get_namespace()
    logger.debug(f"Using database {database_path} namespace {namespace}")

    try:
        with DocumentStore(database_path) as store:
            grid = GridFS(store, namespace, default_chunk_size=config.get_default_chunk_size())
            return dispatch(invocation.command, grid, out)
    except HANDLED_ERRORS as e:
        code = exit_code_for(e)
        logger.debug(f"{invocation.command.command} failed with exit code {code}", exc_info=True)
        err.write(f"ERROR: {e}\n")
        return code


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
