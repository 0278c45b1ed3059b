"""HTML exception formatter.

Keeping formatting here prevents drift between transports and keeps every
notification consistent regardless of how it is delivered.
"""

from __future__ import annotations

import html
import re
from typing import List, Optional

from sneaker.core.models import ExceptionEvent

DEFAULT_SUBJECT_CHARS = 200


def _collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def format_location(event: ExceptionEvent) -> str:
    return f"{event.file}:{event.line}"


class HtmlExceptionFormatter:
    """Render events into a one-line subject and an HTML mail body."""

    def __init__(self, app_name: Optional[str] = None, subject_chars: int = DEFAULT_SUBJECT_CHARS) -> None:
        self._app_name = app_name
        self._subject_chars = subject_chars

    def to_subject(self, event: ExceptionEvent) -> str:
        """Return ``[app] Type: message in file:line`` clipped to one line."""

        message = _collapse_whitespace(event.message)
        subject = f"{event.type_name}: {message}" if message else event.type_name
        subject = f"{subject} in {format_location(event)}"
        if self._app_name:
            subject = f"[{self._app_name}] {subject}"
        if len(subject) > self._subject_chars:
            subject = subject[: self._subject_chars - 3].rstrip() + "..."
        return subject

    def to_body(self, event: ExceptionEvent) -> str:
        """Return a standalone HTML document describing the event."""

        title = html.escape(event.type_name)
        parts: List[str] = [
            "<!DOCTYPE html>",
            "<html>",
            "<head><meta charset=\"utf-8\"><title>" + title + "</title></head>",
            "<body style=\"font-family: sans-serif;\">",
        ]
        if self._app_name:
            parts.append(f"<p><b>Application:</b> {html.escape(self._app_name)}</p>")

        parts.extend(
            [
                f"<h2>{title}</h2>",
                f"<p><b>Message:</b> {html.escape(event.message)}</p>",
                f"<p><b>Location:</b> {html.escape(format_location(event))}</p>",
            ]
        )

        request = event.request
        if request is not None:
            rows = [
                ("Method", request.method),
                ("URL", request.url),
                ("Client IP", request.client_ip),
                ("User agent", request.user_agent),
            ]
            parts.append("<h3>Request</h3>")
            parts.append("<table>")
            for label, value in rows:
                if value:
                    parts.append(f"<tr><th align=\"left\">{label}</th><td>{html.escape(value)}</td></tr>")
            parts.append("</table>")

        if event.traceback:
            parts.append("<h3>Traceback</h3>")
            parts.append(f"<pre>{html.escape(event.traceback)}</pre>")

        parts.extend(["</body>", "</html>"])
        return "\n".join(parts)
