"""Running MD5 digest over an object's content, fed one chunk at a time."""

import hashlib
from typing import Optional


class IncrementalChecksumCalculator:
    """
    MD5 of a chunk stream plus the number of bytes seen.

    The hex digest is what a stored object records in its ``md5`` field, so
    uploads use it to fill the field and reads use it to check it.
    """

    def __init__(self):
        self._md5 = hashlib.md5()
        self._digest: Optional[str] = None
        self.bytes_seen = 0

    def update(self, data: bytes) -> None:
        if self._digest is not None:
            raise ValueError("Checksum already finalized")
        self._md5.update(data)
        self.bytes_seen += len(data)

    def finalize(self) -> str:
        if self._digest is None:
            self._digest = self._md5.hexdigest()
        return self._digest
