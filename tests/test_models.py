from __future__ import annotations

from sneaker.core.models import UNKNOWN_FILE, ExceptionEvent, RequestContext


def _boom() -> None:
    raise KeyError("missing")


def test_from_exception_uses_innermost_frame() -> None:
    try:
        _boom()
    except KeyError as exc:
        event = ExceptionEvent.from_exception(exc)

    assert event.file == __file__
    assert event.line == _boom.__code__.co_firstlineno + 1
    assert event.message == "'missing'"
    assert event.type_name == "KeyError"
    assert event.lineage[:2] == ("KeyError", "LookupError")
    assert "Traceback" in event.traceback
    assert event.user_agent is None


def test_from_exception_without_traceback() -> None:
    event = ExceptionEvent.from_exception(ValueError("never raised"))

    assert event.file == UNKNOWN_FILE
    assert event.line == 0
    assert "ValueError: never raised" in event.traceback


def test_request_user_agent_is_exposed() -> None:
    request = RequestContext(user_agent="curl/8.0", url="https://example.com/", method="GET")

    event = ExceptionEvent.from_exception(RuntimeError("x"), request=request)

    assert event.user_agent == "curl/8.0"
    assert event.request is request


class Unprintable(Exception):
    def __str__(self) -> str:
        raise RuntimeError("cannot render")


def test_from_exception_falls_back_to_repr_when_str_fails() -> None:
    event = ExceptionEvent.from_exception(Unprintable("secret"))

    assert event.message == "Unprintable('secret')"
    assert event.type_name.endswith("Unprintable")
