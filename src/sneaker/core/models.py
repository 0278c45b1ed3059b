"""Core domain models.

These dataclasses are shared across the core and adapters so that neither
side depends on live exception objects or any web framework request type.
"""

from __future__ import annotations

import traceback as traceback_module
from dataclasses import dataclass
from typing import Optional, Tuple

from sneaker.core.capture import exception_lineage, qualified_type_name

UNKNOWN_FILE = "<unknown>"


def _safe_message(exc: BaseException) -> str:
    try:
        return str(exc)
    except Exception:
        pass
    try:
        return repr(exc)
    except Exception:
        return f"<unprintable {type(exc).__name__}>"


@dataclass(frozen=True)
class RequestContext:
    """Request metadata attached to an event raised while serving HTTP."""

    user_agent: Optional[str] = None
    url: Optional[str] = None
    method: Optional[str] = None
    client_ip: Optional[str] = None


@dataclass(frozen=True)
class ExceptionEvent:
    """Immutable record of one captured exception."""

    message: str
    file: str
    line: int
    type_name: str
    lineage: Tuple[str, ...] = ()
    traceback: str = ""
    request: Optional[RequestContext] = None

    @property
    def user_agent(self) -> Optional[str]:
        if self.request is None:
            return None
        return self.request.user_agent

    @classmethod
    def from_exception(
        cls, exc: BaseException, request: Optional[RequestContext] = None
    ) -> "ExceptionEvent":
        """Build an event from a live exception.

        File and line come from the innermost traceback frame, which is where
        the exception was actually raised.
        """

        frames = traceback_module.extract_tb(exc.__traceback__) if exc.__traceback__ else []
        if frames:
            file, line = frames[-1].filename, frames[-1].lineno or 0
        else:
            file, line = UNKNOWN_FILE, 0

        exc_type = type(exc)
        rendered = "".join(traceback_module.format_exception(exc_type, exc, exc.__traceback__))
        return cls(
            message=_safe_message(exc),
            file=file,
            line=line,
            type_name=qualified_type_name(exc_type),
            lineage=exception_lineage(exc_type),
            traceback=rendered,
            request=request,
        )
