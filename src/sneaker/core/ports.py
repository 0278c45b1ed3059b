"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for config, storage, formatting, and mail
adapters so that the core can be reused with different backends.
"""

from __future__ import annotations

from datetime import date
from typing import Any, ContextManager, Iterable, List, Protocol, Set

from sneaker.core.models import ExceptionEvent


class ConfigProvider(Protocol):
    """Read-only access to notifier settings."""

    def get(self, key: str, default: Any = None) -> Any:
        ...


class MailTransport(Protocol):
    """Mail delivery required by the core pipeline."""

    def deliver(self, recipients: Iterable[str], subject: str, body: str) -> None:
        ...


class ExceptionFormatter(Protocol):
    """Rendering of an event into a mail subject and an HTML body."""

    def to_subject(self, event: ExceptionEvent) -> str:
        ...

    def to_body(self, event: ExceptionEvent) -> str:
        ...


class Logger(Protocol):
    """The subset of ``logging.Logger`` the notifier reports failures through."""

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        ...


class BlobStore(Protocol):
    """Durable key/blob storage backing the duplicate ledger."""

    def exists(self, key: str) -> bool:
        ...

    def read(self, key: str) -> bytes:
        ...

    def write(self, key: str, data: bytes) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def keys(self, prefix: str) -> List[str]:
        ...

    def lock(self, key: str, timeout: float) -> ContextManager[None]:
        ...


class LedgerPort(Protocol):
    """Per-day fingerprint ledger used for duplicate suppression."""

    def get(self, day_key: str) -> Set[str]:
        ...

    def append(self, day_key: str, fingerprint: str) -> None:
        ...

    def add_if_absent(self, day_key: str, fingerprint: str) -> bool:
        ...

    def prune(self, before: date) -> int:
        ...
