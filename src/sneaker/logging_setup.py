"""Opt-in logging for the sneaker CLI.

Driven by the ``logging`` section of config.json. Secrets named in
``redact.patterns`` are read from the environment and masked in every
rendered record, tracebacks included.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional

from dotenv import load_dotenv

from sneaker import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_SECRET_VARS = ("SNEAKER_SMTP_PASSWORD",)
MASK = "***"


class SecretMaskingFormatter(logging.Formatter):
    """Formatter that replaces known secret values with ``***``."""

    def __init__(self, secrets: Iterable[str], fmt: str = LOG_FORMAT, datefmt: Optional[str] = DATE_FORMAT) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        # Longest first so a secret containing another is masked whole.
        self._secrets = sorted({secret for secret in secrets if secret}, key=len, reverse=True)

    @classmethod
    def from_env(cls, variables: Iterable[str], **kwargs) -> "SecretMaskingFormatter":
        return cls([os.getenv(name, "") for name in variables], **kwargs)

    def format(self, record: logging.LogRecord) -> str:
        rendered = super().format(record)
        for secret in self._secrets:
            rendered = rendered.replace(secret, MASK)
        return rendered


def secret_variables(config: dict) -> tuple[str, ...]:
    redact = config.get("redact") or {}
    if not redact.get("enabled", True):
        return ()
    return tuple(redact.get("patterns", DEFAULT_SECRET_VARS))


def _file_handler(file_config: dict) -> logging.Handler:
    path = settings.resolve_path(file_config.get("path", "logs/sneaker.log"))
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_config.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_config.get("backup_count", 5)),
        encoding="utf-8",
    )


def build_handlers(config: dict) -> list[logging.Handler]:
    """Create the console and rotating-file handlers the config asks for."""

    handlers: list[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())
    file_config = config.get("file") or {}
    if file_config.get("enabled", False):
        handlers.append(_file_handler(file_config))
    return handlers


def configure_logging(config: dict) -> bool:
    """Install handlers on the root logger; returns False when logging stays off."""

    if not config.get("enabled", False):
        return False

    load_dotenv()
    level = getattr(logging, str(config.get("level", "INFO")).upper(), logging.INFO)
    handlers = build_handlers(config)
    if not handlers:
        return False

    formatter = SecretMaskingFormatter.from_env(secret_variables(config))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers)
    return True
