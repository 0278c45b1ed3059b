"""Core capture pipeline.

This module is integration-agnostic. It only relies on ports for config,
ledger, formatting, and mail delivery, so any host application can wire in its
own adapters without changes here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from sneaker.core.bots import is_from_bot
from sneaker.core.capture import matches_capture_list
from sneaker.core.config import NotifierConfig, load_notifier_config
from sneaker.core.dedup import compute_fingerprint, day_key
from sneaker.core.errors import ConfigurationError, FormatterError, TransportError
from sneaker.core.models import ExceptionEvent, RequestContext
from sneaker.core.ports import (
    ConfigProvider,
    ExceptionFormatter,
    LedgerPort,
    Logger,
    MailTransport,
)

LOGGER = logging.getLogger(__name__)


class CaptureStatus(str, Enum):
    SENT = "sent"
    SILENT = "silent"
    BOT = "bot"
    DUPLICATE = "duplicate"
    NOT_CAPTURED = "not_captured"
    FAILED = "failed"


@dataclass(frozen=True)
class CaptureResult:
    """Outcome of one capture call; ``error`` is set only when it FAILED."""

    status: CaptureStatus
    error: Optional[Exception] = None

    @property
    def sent(self) -> bool:
        return self.status is CaptureStatus.SENT


class Notifier:
    """Decides whether a captured exception is mailed, and mails it."""

    def __init__(
        self,
        config: ConfigProvider,
        ledger: LedgerPort,
        transport: MailTransport,
        formatter: ExceptionFormatter,
        logger: Optional[Logger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._config = config
        self._ledger = ledger
        self._transport = transport
        self._formatter = formatter
        self._logger = logger or logging.getLogger("sneaker")
        self._clock = clock or datetime.now

    def capture(
        self,
        exc: BaseException,
        request: Optional[RequestContext] = None,
        propagate_internal_errors: bool = False,
    ) -> CaptureResult:
        """Capture a live exception; see ``capture_exception``."""

        try:
            event = ExceptionEvent.from_exception(exc, request=request)
        except Exception as error:
            return self._fail(error, propagate_internal_errors)
        return self.capture_exception(event, propagate_internal_errors=propagate_internal_errors)

    def capture_exception(
        self, event: ExceptionEvent, propagate_internal_errors: bool = False
    ) -> CaptureResult:
        """Run one event through the capture pipeline.

        Failures inside the pipeline are logged and returned as a FAILED
        result so they never disturb the host application's own error
        handling, unless ``propagate_internal_errors`` asks for them.
        """

        try:
            config = load_notifier_config(self._config)

            if config.silent:
                return CaptureResult(CaptureStatus.SILENT)

            if is_from_bot(event.user_agent, config.ignored_bots):
                LOGGER.debug("Bot skip for %s", event.type_name)
                return CaptureResult(CaptureStatus.BOT)

            status = self._check_capture(event, config)
            if status is not None:
                return CaptureResult(status)

            self._send(event, config)
            return CaptureResult(CaptureStatus.SENT)
        except Exception as exc:
            return self._fail(exc, propagate_internal_errors)

    def _fail(self, exc: Exception, propagate: bool) -> CaptureResult:
        self._logger.error(
            "Exception thrown in Sneaker when capturing an exception (%s: %s)",
            type(exc).__name__,
            exc,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        if propagate:
            raise exc
        return CaptureResult(CaptureStatus.FAILED, error=exc)

    def should_capture(self, event: ExceptionEvent, config: NotifierConfig) -> bool:
        """Return True when the event passes dedup and the capture list."""

        return self._check_capture(event, config) is None

    def _check_capture(
        self, event: ExceptionEvent, config: NotifierConfig
    ) -> Optional[CaptureStatus]:
        # Duplicate suppression runs before the capture list, even for "*".
        if self.is_duplicate(event, config):
            LOGGER.debug("Dedup skip for %s at %s:%s", event.type_name, event.file, event.line)
            return CaptureStatus.DUPLICATE

        if not config.capture:
            return CaptureStatus.NOT_CAPTURED

        lineage = event.lineage or (event.type_name,)
        if not matches_capture_list(lineage, config.capture):
            return CaptureStatus.NOT_CAPTURED
        return None

    def is_duplicate(self, event: ExceptionEvent, config: NotifierConfig) -> bool:
        """Return True when the event was already recorded today.

        The first occurrence is recorded and allowed through in the same
        atomic ledger call.
        """

        if not config.ignore_duplicates:
            return False

        fingerprint = compute_fingerprint(event.message, event.file, event.line)
        return not self._ledger.add_if_absent(day_key(self._clock()), fingerprint)

    def _send(self, event: ExceptionEvent, config: NotifierConfig) -> None:
        if not config.recipients:
            raise ConfigurationError("No recipients configured for exception notifications")

        try:
            subject = self._formatter.to_subject(event)
            body = self._formatter.to_body(event)
        except FormatterError:
            raise
        except Exception as exc:
            raise FormatterError(f"Failed to render {event.type_name}: {exc}") from exc

        try:
            self._transport.deliver(config.recipients, subject, body)
        except TransportError:
            raise
        except Exception as exc:
            raise TransportError(f"Failed to deliver notification: {exc}") from exc
