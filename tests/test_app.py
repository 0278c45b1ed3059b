from __future__ import annotations

import json
from datetime import date, timedelta

import pytest

from sneaker import app
from sneaker.adapters.sqlite_ledger import SQLiteLedger
from sneaker.core.dedup import day_key
from sneaker.core.errors import ConfigurationError
from sneaker.core.ledger import DuplicateLedger


class FakeTransport:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[tuple[tuple[str, ...], str, str]] = []
        self._fail = fail

    def deliver(self, recipients, subject: str, body: str) -> None:
        if self._fail:
            raise OSError("connection refused")
        self.sent.append((tuple(recipients), subject, body))


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SILENT", "CAPTURE", "IGNORE_DUPLICATES", "IGNORED_BOTS", "TO"):
        monkeypatch.delenv(f"SNEAKER_{name}", raising=False)


def _write_config(tmp_path, **sneaker_overrides) -> str:
    sneaker = {"silent": False, "capture": ["*"], "to": ["ops@example.com"]}
    sneaker.update(sneaker_overrides)
    config = {
        "sneaker": sneaker,
        "ledger": {"backend": "file", "path": str(tmp_path / "storage")},
        "smtp": {"host": "relay.local", "from_email": "app@example.com"},
    }
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    return str(path)


def test_check_sends_test_exception(tmp_path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    transport = FakeTransport()
    monkeypatch.setattr(app, "build_smtp_transport", lambda settings: transport)

    code = app.main(["--no-banner", "--config", _write_config(tmp_path), "check"])

    assert code == 0
    assert len(transport.sent) == 1
    recipients, subject, _ = transport.sent[0]
    assert recipients == ("ops@example.com",)
    assert "SneakerCheckException" in subject
    assert "Test exception sent." in capsys.readouterr().out


def test_check_reports_silent_mode(tmp_path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    transport = FakeTransport()
    monkeypatch.setattr(app, "build_smtp_transport", lambda settings: transport)

    code = app.main(["--no-banner", "--config", _write_config(tmp_path, silent=True), "check"])

    assert code == 0
    assert transport.sent == []
    assert "silent" in capsys.readouterr().out


def test_blank_silent_variable_keeps_json_silent_mode(tmp_path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setenv("SNEAKER_SILENT", "")
    transport = FakeTransport()
    monkeypatch.setattr(app, "build_smtp_transport", lambda settings: transport)

    code = app.main(["--no-banner", "--config", _write_config(tmp_path, silent=True), "check"])

    assert code == 0
    assert transport.sent == []
    assert "silent" in capsys.readouterr().out


def test_check_fails_loudly_on_transport_error(tmp_path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setattr(app, "build_smtp_transport", lambda settings: FakeTransport(fail=True))

    code = app.main(["--no-banner", "--config", _write_config(tmp_path), "check"])

    assert code == 1
    assert "TransportError" in capsys.readouterr().out


def test_prune_removes_old_day_records(tmp_path) -> None:
    config_path = _write_config(tmp_path)
    ledger = app.build_ledger({"backend": "file", "path": str(tmp_path / "storage")})
    assert isinstance(ledger, DuplicateLedger)
    old_day = day_key(date.today() - timedelta(days=30))
    ledger.append(old_day, "old")
    ledger.append(day_key(date.today()), "fresh")

    code = app.main(["--no-banner", "--config", config_path, "prune", "--keep-days", "7"])

    assert code == 0
    day_files = sorted(path.name for path in (tmp_path / "storage" / "logs").glob("*.json"))
    assert day_files == [f"{day_key(date.today())}.json"]


def test_build_ledger_selects_sqlite(tmp_path) -> None:
    ledger = app.build_ledger({"backend": "sqlite", "path": str(tmp_path)})

    assert isinstance(ledger, SQLiteLedger)
    assert (tmp_path / "sneaker.db").exists()
    assert ledger.add_if_absent("19.10.2026", "abc") is True


def test_build_ledger_rejects_unknown_backend(tmp_path) -> None:
    with pytest.raises(ConfigurationError):
        app.build_ledger({"backend": "redis", "path": str(tmp_path)})


def test_no_command_prints_help(capsys) -> None:
    assert app.main([]) == 2
    assert "usage: sneaker" in capsys.readouterr().out
