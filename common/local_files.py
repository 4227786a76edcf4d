"""Local filesystem side of put/get: turns a path into a byte stream and back."""

import os
import stat
import sys
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from common.constants import STDIO_PATH
from common.logging_config import get_logger

logger = get_logger(__name__)


def is_stdio(path: str) -> bool:
    return path == STDIO_PATH


@contextmanager
def open_for_read(path: str) -> Iterator[BinaryIO]:
    """
    Open a local source for reading.

    Args:
        path: Local file path, or "-" for standard input

    Yields:
        Binary stream positioned at the start of the content

    Raises:
        OSError: If the file cannot be opened
    """
    if is_stdio(path):
        yield sys.stdin.buffer
        return

    with open(path, 'rb') as f:
        yield f


def _destination_mode(target: Path) -> int:
    """Permission bits for a finished download: the replaced file's, else 0o666 minus the umask."""
    try:
        return stat.S_IMODE(os.stat(target).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


@contextmanager
def open_for_write(path: str) -> Iterator[BinaryIO]:
    """
    Open a local destination for writing.

    File destinations are written to a temporary file in the same directory
    and moved over ``path`` only when the block exits cleanly. If the block
    raises, the temporary file is removed and ``path`` is left untouched.
    The finished file keeps the permission bits of the file it replaces;
    a new file gets the ones a plain open() would give it.

    Args:
        path: Local file path, or "-" for standard output

    Yields:
        Binary sink
    """
    if is_stdio(path):
        sink = sys.stdout.buffer
        yield sink
        sink.flush()
        return

    target = Path(path)
    directory = target.parent if str(target.parent) else Path('.')
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".part", dir=directory)
    try:
        with os.fdopen(fd, 'wb') as f:
            yield f
        os.chmod(tmp_name, _destination_mode(target))
        os.replace(tmp_name, target)
        logger.debug(f"Moved {tmp_name} into place at {target}")
    except BaseException:
        logger.debug(f"Discarding partial download {tmp_name}")
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
