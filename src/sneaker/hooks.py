"""Process-level integration: report uncaught exceptions through a Notifier."""

from __future__ import annotations

import logging
import sys
from typing import Callable

from sneaker.core.notifier import Notifier

LOGGER = logging.getLogger(__name__)

ExceptHook = Callable[..., None]


def install_excepthook(notifier: Notifier) -> ExceptHook:
    """Wrap ``sys.excepthook`` so uncaught exceptions are captured first.

    The previous hook always runs afterwards, even when capturing fails.
    Returns the previous hook so callers can restore it.
    """

    previous = sys.excepthook

    def _hook(exc_type, exc, tb) -> None:
        try:
            # Ctrl+C is not an application error.
            if not issubclass(exc_type, KeyboardInterrupt):
                notifier.capture(exc)
        except Exception:
            LOGGER.exception("Capturing an uncaught %s failed", exc_type.__name__)
        finally:
            previous(exc_type, exc, tb)

    sys.excepthook = _hook
    return previous


def uninstall_excepthook(previous: ExceptHook) -> None:
    sys.excepthook = previous
