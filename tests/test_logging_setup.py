from __future__ import annotations

import logging
import sys

import pytest

from sneaker import logging_setup
from sneaker.logging_setup import SecretMaskingFormatter, build_handlers, configure_logging, secret_variables


def _record(msg: str, *args) -> logging.LogRecord:
    return logging.LogRecord("sneaker", logging.ERROR, __file__, 1, msg, args, None)


def test_smtp_password_is_masked_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SNEAKER_SMTP_PASSWORD", "hunter2")

    formatter = SecretMaskingFormatter.from_env(secret_variables({}))
    rendered = formatter.format(_record("login failed with %s", "hunter2"))

    assert "hunter2" not in rendered
    assert "login failed with ***" in rendered


def test_masking_covers_tracebacks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SNEAKER_SMTP_PASSWORD", "hunter2")
    formatter = SecretMaskingFormatter.from_env(["SNEAKER_SMTP_PASSWORD"])
    try:
        raise RuntimeError("auth hunter2 rejected")
    except RuntimeError:
        record = _record("delivery failed")
        record.exc_info = sys.exc_info()

    assert "hunter2" not in formatter.format(record)


def test_longer_secret_is_masked_whole() -> None:
    formatter = SecretMaskingFormatter(["abc", "abcdef", ""])

    assert formatter.format(_record("token abcdef")).endswith("token ***")


def test_redaction_can_be_disabled() -> None:
    assert secret_variables({"redact": {"enabled": False}}) == ()
    assert secret_variables({"redact": {"patterns": ["API_KEY"]}}) == ("API_KEY",)


def test_logging_is_off_unless_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr(logging_setup.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    assert configure_logging({}) is False
    assert configure_logging({"enabled": True, "console": False}) is False
    assert calls == []


def test_enabled_logging_installs_masking_handlers(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    calls = []
    monkeypatch.setattr(logging_setup.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    log_path = tmp_path / "logs" / "sneaker.log"

    installed = configure_logging(
        {"enabled": True, "level": "debug", "file": {"enabled": True, "path": str(log_path)}}
    )

    assert installed is True
    handlers = calls[0]["handlers"]
    assert calls[0]["level"] == logging.DEBUG
    assert len(handlers) == 2
    assert all(isinstance(handler.formatter, SecretMaskingFormatter) for handler in handlers)
    assert log_path.parent.is_dir()
    for handler in handlers:
        handler.close()


def test_build_handlers_console_only() -> None:
    handlers = build_handlers({})

    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.StreamHandler)
