"""Command-line entry point for sneaker."""

from __future__ import annotations

import argparse
import logging
import os
from datetime import date, datetime, timedelta
from typing import Optional

from art import tprint

from sneaker import settings
from sneaker.adapters.config_providers import ChainConfigProvider, DictConfigProvider, EnvConfigProvider
from sneaker.adapters.file_store import LocalFileStore
from sneaker.adapters.html_formatter import HtmlExceptionFormatter
from sneaker.adapters.smtp_transport import build_smtp_transport
from sneaker.adapters.sqlite_ledger import SQLiteLedger
from sneaker.core.errors import ConfigurationError
from sneaker.core.ledger import DuplicateLedger
from sneaker.core.notifier import CaptureStatus, Notifier
from sneaker.core.ports import LedgerPort
from sneaker.logging_setup import configure_logging

NAME = "SNEAKER"
FONT = "tarty-1"

LOGGER = logging.getLogger(__name__)


class SneakerCheckException(RuntimeError):
    """Raised on purpose by ``sneaker check`` to exercise the pipeline."""


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def build_ledger(config: dict) -> LedgerPort:
    """Select the ledger backend from the ``ledger`` config section."""

    backend = config.get("backend", settings.DEFAULT_LEDGER_BACKEND)
    path = settings.resolve_path(config.get("path", settings.DEFAULT_LEDGER_PATH))
    lock_timeout = float(config.get("lock_timeout", settings.DEFAULT_LOCK_TIMEOUT))

    if backend == "file":
        return DuplicateLedger(LocalFileStore(path), lock_timeout=lock_timeout)
    if backend == "sqlite":
        if os.path.isdir(path):
            path = os.path.join(path, "sneaker.db")
        ledger = SQLiteLedger(path, lock_timeout=lock_timeout)
        ledger.init_db()
        return ledger
    raise ConfigurationError("ledger.backend must be 'file' or 'sqlite'")


def build_notifier(config: dict) -> Notifier:
    """Wire a Notifier from config.json sections plus SNEAKER_* overrides."""

    provider = ChainConfigProvider(EnvConfigProvider(), DictConfigProvider(config.get("sneaker", {})))
    smtp_cfg = config.get("smtp", {})
    return Notifier(
        config=provider,
        ledger=build_ledger(config.get("ledger", {})),
        transport=build_smtp_transport(smtp_cfg),
        formatter=HtmlExceptionFormatter(app_name=smtp_cfg.get("app_name")),
        logger=logging.getLogger("sneaker"),
    )


def _check(config: dict) -> int:
    notifier = build_notifier(config)
    # A timestamped message keeps repeated checks out of the dedup ledger.
    stamp = datetime.now().isoformat(timespec="seconds")
    try:
        raise SneakerCheckException(f"Sneaker is working at {stamp}. This is a test exception.")
    except SneakerCheckException as exc:
        try:
            result = notifier.capture(exc, propagate_internal_errors=True)
        except Exception as error:
            print(f"Sneaker check failed: {type(error).__name__}: {error}")
            return 1

    messages = {
        CaptureStatus.SENT: "Test exception sent.",
        CaptureStatus.SILENT: "Sneaker is silent; nothing was sent.",
        CaptureStatus.NOT_CAPTURED: "The capture list does not include the test exception; nothing was sent.",
        CaptureStatus.DUPLICATE: "The test exception was already reported today.",
        CaptureStatus.BOT: "The request was classified as a bot; nothing was sent.",
    }
    print(messages.get(result.status, result.status.value))
    return 0


def _prune(config: dict, keep_days: int) -> int:
    ledger = build_ledger(config.get("ledger", {}))
    before = date.today() - timedelta(days=keep_days)
    removed = ledger.prune(before)
    LOGGER.info("Ledger prune removed %s day records older than %s", removed, before.isoformat())
    print(f"Removed {removed} ledger day records older than {before.isoformat()}.")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="sneaker")
    parser.add_argument("--config", help="Path to config.json", default=None)
    parser.add_argument("--no-banner", action="store_true", help="Skip the startup banner")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("check", help="Send a test exception through the pipeline")
    prune_parser = subparsers.add_parser("prune", help="Delete old duplicate ledger records")
    prune_parser.add_argument("--keep-days", type=int, default=7, help="Days of ledger to keep")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 2

    if not args.no_banner:
        _print_banner()

    config = settings.load_config(args.config)
    configure_logging(config.get("logging", {}))

    if args.command == "prune":
        return _prune(config, args.keep_days)
    return _check(config)


if __name__ == "__main__":
    raise SystemExit(main())
