"""Error kinds raised inside the capture pipeline.

All of them are caught at the ``Notifier.capture_exception`` boundary and
logged, so they only reach the caller when propagation is requested.
"""

from __future__ import annotations


class SneakerError(Exception):
    """Base class for internal sneaker failures."""


class ConfigurationError(SneakerError):
    """A config value is missing or malformed."""


class LedgerIOError(SneakerError):
    """The duplicate ledger store is unreachable, locked too long, or corrupt."""


class TransportError(SneakerError):
    """Mail delivery failed."""


class FormatterError(SneakerError):
    """Rendering an exception into a subject or body failed."""


__all__ = [
    "SneakerError",
    "ConfigurationError",
    "LedgerIOError",
    "TransportError",
    "FormatterError",
]
