from __future__ import annotations

from sneaker.adapters.html_formatter import HtmlExceptionFormatter
from sneaker.core.models import ExceptionEvent, RequestContext


def _event(**overrides) -> ExceptionEvent:
    values = dict(
        message="Division by <zero>",
        file="/srv/app/math.py",
        line=7,
        type_name="ZeroDivisionError",
        traceback="Traceback (most recent call last):\n  File \"/srv/app/math.py\", line 7\n",
    )
    values.update(overrides)
    return ExceptionEvent(**values)


def test_subject_names_type_message_and_location() -> None:
    subject = HtmlExceptionFormatter().to_subject(_event())

    assert subject == "ZeroDivisionError: Division by <zero> in /srv/app/math.py:7"


def test_subject_is_single_line_prefixed_and_clipped() -> None:
    formatter = HtmlExceptionFormatter(app_name="billing", subject_chars=60)

    subject = formatter.to_subject(_event(message="line one\nline two " + "x" * 100))

    assert subject.startswith("[billing] ZeroDivisionError: line one line two")
    assert "\n" not in subject
    assert len(subject) == 60
    assert subject.endswith("...")


def test_body_escapes_html() -> None:
    body = HtmlExceptionFormatter().to_body(_event())

    assert "Division by &lt;zero&gt;" in body
    assert "<zero>" not in body
    assert "<pre>Traceback" in body


def test_body_includes_request_details() -> None:
    request = RequestContext(user_agent="curl/8.0", url="https://example.com/?a=1&b=2", method="POST")

    body = HtmlExceptionFormatter(app_name="billing").to_body(_event(request=request))

    assert "<b>Application:</b> billing" in body
    assert "https://example.com/?a=1&amp;b=2" in body
    assert "POST" in body
    assert "Client IP" not in body
