"""Local filesystem blob store.

Implements the core BlobStore port with one file per key under a root
directory. Writes go through a temp file and an atomic rename, and locking
uses ``fcntl.flock`` on a sibling ``.lock`` file so that separate processes
sharing the directory serialize their read-modify-write cycles.
"""

from __future__ import annotations

import fcntl
import os
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Union

from sneaker.core.errors import LedgerIOError

LOCK_SUFFIX = ".lock"
# Poll interval while waiting for a contended lock.
LOCK_POLL_SECONDS = 0.01


class LocalFileStore:
    """Thin filesystem wrapper that satisfies the BlobStore contract."""

    def __init__(self, root: Union[str, Path]) -> None:
        self._root = Path(root)

    def _path(self, key: str) -> Path:
        path = (self._root / key).resolve()
        root = self._root.resolve()
        if path == root or root not in path.parents:
            raise LedgerIOError(f"Key escapes the store root: {key}")
        return path

    def exists(self, key: str) -> bool:
        return self._path(key).exists()

    def read(self, key: str) -> bytes:
        try:
            return self._path(key).read_bytes()
        except OSError as exc:
            raise LedgerIOError(f"Failed to read {key}: {exc}") from exc

    def write(self, key: str, data: bytes) -> None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Temp file lives in the same directory so the rename stays atomic.
            fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(data)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(temp_name, path)
            except BaseException:
                if os.path.exists(temp_name):
                    os.unlink(temp_name)
                raise
        except OSError as exc:
            raise LedgerIOError(f"Failed to write {key}: {exc}") from exc

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
            Path(f"{path}{LOCK_SUFFIX}").unlink(missing_ok=True)
        except OSError as exc:
            raise LedgerIOError(f"Failed to delete {key}: {exc}") from exc

    def keys(self, prefix: str) -> List[str]:
        """Return stored keys starting with ``prefix`` (lock and temp files excluded)."""

        if not self._root.exists():
            return []
        found: List[str] = []
        for path in self._root.rglob("*"):
            if not path.is_file() or path.name.startswith(".") or path.name.endswith(LOCK_SUFFIX):
                continue
            key = path.relative_to(self._root).as_posix()
            if key.startswith(prefix):
                found.append(key)
        return sorted(found)

    @contextmanager
    def lock(self, key: str, timeout: float) -> Iterator[None]:
        """Hold an exclusive lock on ``key`` for the duration of the block."""

        path = self._path(key)
        lock_path = Path(f"{path}{LOCK_SUFFIX}")
        try:
            lock_path.parent.mkdir(parents=True, exist_ok=True)
            handle = open(lock_path, "a")
        except OSError as exc:
            raise LedgerIOError(f"Failed to open lock for {key}: {exc}") from exc

        with handle:
            deadline = time.monotonic() + timeout
            while True:
                try:
                    fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                    break
                except BlockingIOError:
                    if time.monotonic() >= deadline:
                        raise LedgerIOError(
                            f"Timed out after {timeout}s waiting for lock on {key}"
                        ) from None
                    time.sleep(LOCK_POLL_SECONDS)
                except OSError as exc:
                    raise LedgerIOError(f"Failed to lock {key}: {exc}") from exc
            try:
                yield
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
