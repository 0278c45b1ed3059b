"""Day-partitioned duplicate ledger over a blob store.

Each day-key is stored as one record (``logs/<day-key>.json``) holding a JSON
array of fingerprints in insertion order. Every read-modify-write runs under
the store's per-key lock so concurrent first occurrences cannot both win.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import List, Set

from sneaker.core.dedup import parse_day_key
from sneaker.core.errors import LedgerIOError
from sneaker.core.ports import BlobStore

LOGGER = logging.getLogger(__name__)

LEDGER_PREFIX = "logs/"
LEDGER_SUFFIX = ".json"


def ledger_key(day_key: str) -> str:
    return f"{LEDGER_PREFIX}{day_key}{LEDGER_SUFFIX}"


class DuplicateLedger:
    """Ledger port implementation backed by any BlobStore."""

    def __init__(self, store: BlobStore, lock_timeout: float = 5.0) -> None:
        self._store = store
        self._lock_timeout = lock_timeout

    def _read(self, key: str) -> List[str]:
        # Day records are created lazily the first time a day is touched.
        if not self._store.exists(key):
            self._write(key, [])
            return []

        raw = self._store.read(key)
        try:
            entries = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise LedgerIOError(f"Ledger record {key} is not valid JSON") from exc

        if not isinstance(entries, list) or not all(isinstance(item, str) for item in entries):
            raise LedgerIOError(f"Ledger record {key} is not a list of fingerprints")
        return entries

    def _write(self, key: str, entries: List[str]) -> None:
        self._store.write(key, json.dumps(entries).encode("utf-8"))

    def get(self, day_key: str) -> Set[str]:
        """Return the fingerprints recorded for a day."""

        key = ledger_key(day_key)
        with self._store.lock(key, self._lock_timeout):
            return set(self._read(key))

    def append(self, day_key: str, fingerprint: str) -> None:
        """Record a fingerprint for a day; already-present fingerprints are kept once."""

        self.add_if_absent(day_key, fingerprint)

    def add_if_absent(self, day_key: str, fingerprint: str) -> bool:
        """Atomically record a fingerprint and report whether it was new."""

        key = ledger_key(day_key)
        with self._store.lock(key, self._lock_timeout):
            entries = self._read(key)
            if fingerprint in entries:
                return False
            entries.append(fingerprint)
            self._write(key, entries)
        return True

    def prune(self, before: date) -> int:
        """Delete day records older than ``before`` and return how many were removed."""

        removed = 0
        for key in self._store.keys(LEDGER_PREFIX):
            if not key.endswith(LEDGER_SUFFIX):
                continue
            raw_day = key[len(LEDGER_PREFIX) : -len(LEDGER_SUFFIX)]
            try:
                day = parse_day_key(raw_day)
            except ValueError:
                LOGGER.debug("Skipping foreign ledger key %s", key)
                continue
            if day < before:
                with self._store.lock(key, self._lock_timeout):
                    self._store.delete(key)
                removed += 1
        return removed
