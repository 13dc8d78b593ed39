"""
=============================================================================
BYTE STORE
=============================================================================

Key-addressed storage used by the /files/ routes.

    read(key)        → bytes        raises StorageNotFound, StorageIOError
    write(key, data) → None         raises StorageIOError

The router only talks to the ByteStore protocol. FileStore is the real
implementation: each key is a file name inside one configured directory.

=============================================================================
ERROR MAPPING
=============================================================================

    ┌──────────────────────┬──────────────────┬──────────────────────────┐
    │  OSError             │  StorageError    │  HTTP (see handlers)     │
    ├──────────────────────┼──────────────────┼──────────────────────────┤
    │  FileNotFoundError   │  StorageNotFound │  404 Not Found           │
    │  key outside root    │  StorageNotFound │  404 (read only)         │
    │  anything else       │  StorageIOError  │  500 Internal Error      │
    └──────────────────────┴──────────────────┴──────────────────────────┘

There is no cross-request locking. Two concurrent writes to the same key
race at the filesystem and the last writer wins.

=============================================================================
"""

import logging
import os
from pathlib import Path
from typing import Protocol, Union

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for byte-store failures."""


class StorageNotFound(StorageError):
    """No value stored under the requested key."""


class StorageIOError(StorageError):
    """The store exists but the read or write failed."""


class ByteStore(Protocol):
    """Interface consumed by the file routes."""

    def read(self, key: str) -> bytes:
        ...

    def write(self, key: str, data: bytes) -> None:
        ...


class FileStore:
    """
    ByteStore backed by files in a single directory.

    Keys are joined onto the root directory. A key that resolves outside
    the root (e.g. "../../etc/passwd") is refused: reading it reports
    StorageNotFound and writing it reports StorageIOError, so the store
    never touches files it does not own.

    Usage:
        store = FileStore("/tmp/data")
        store.write("report.txt", b"hello world")
        store.read("report.txt")     # b"hello world"
    """

    def __init__(self, root: Union[str, os.PathLike]):
        # Resolve once so the containment check compares absolute paths
        self.root = Path(root).resolve()

    def __repr__(self) -> str:
        return f"FileStore({str(self.root)!r})"

    def _resolve(self, key: str) -> Path:
        """
        Map a key to a path inside root.

        Raises:
            ValueError: The key escapes the root directory.
        """
        path = (self.root / key).resolve()
        try:
            path.relative_to(self.root)
        except ValueError:
            raise ValueError(f"Key escapes storage root: {key!r}") from None
        return path

    def read(self, key: str) -> bytes:
        try:
            path = self._resolve(key)
        except ValueError as e:
            logger.warning("Refusing read: %s", e)
            raise StorageNotFound(key) from e

        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError as e:
            raise StorageNotFound(key) from e
        except OSError as e:
            raise StorageIOError(f"Failed to read {key!r}: {e}") from e

    def write(self, key: str, data: bytes) -> None:
        """
        Create or overwrite the file for `key` and sync it to disk.
        """
        try:
            path = self._resolve(key)
        except ValueError as e:
            logger.warning("Refusing write: %s", e)
            raise StorageIOError(str(e)) from e

        try:
            with open(path, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise StorageIOError(f"Failed to write {key!r}: {e}") from e
