"""Static configuration for the sneaker CLI.

All user-editable settings (capture switches, ledger, SMTP relay, logging)
live in a single JSON file so they can be edited without touching Python.
Secrets stay in the environment.
"""

import json
import os
from typing import Optional

PROJECT_ROOT = os.path.abspath(os.getcwd())

# The config path can be overridden per deployment.
CONFIG_PATH = os.getenv("SNEAKER_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))

# Ledger defaults used when config.json leaves the section out.
DEFAULT_LEDGER_BACKEND = "file"
DEFAULT_LEDGER_PATH = "storage"
DEFAULT_LOCK_TIMEOUT = 5.0


def load_config(path: Optional[str] = None) -> dict:
    """Load config.json with a flat, user-friendly schema."""

    path = path or CONFIG_PATH
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def resolve_path(path: str) -> str:
    """Resolve config-relative paths against the project root."""

    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)
