"""In-memory blob store for tests and single-process hosts."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List

from sneaker.core.errors import LedgerIOError


class InMemoryStore:
    """Dict-backed BlobStore; one process-wide lock serializes all keys."""

    def __init__(self) -> None:
        self._blobs: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def exists(self, key: str) -> bool:
        return key in self._blobs

    def read(self, key: str) -> bytes:
        try:
            return self._blobs[key]
        except KeyError:
            raise LedgerIOError(f"No such key: {key}") from None

    def write(self, key: str, data: bytes) -> None:
        self._blobs[key] = bytes(data)

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)

    def keys(self, prefix: str) -> List[str]:
        return sorted(key for key in self._blobs if key.startswith(prefix))

    @contextmanager
    def lock(self, key: str, timeout: float) -> Iterator[None]:
        if not self._lock.acquire(timeout=timeout):
            raise LedgerIOError(f"Timed out after {timeout}s waiting for lock on {key}")
        try:
            yield
        finally:
            self._lock.release()
