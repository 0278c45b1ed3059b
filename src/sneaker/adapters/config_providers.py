"""Configuration provider adapters.

Providers only hand back raw values; coercion and validation happen in
``sneaker.core.config`` so every provider behaves the same way.
"""

from __future__ import annotations

import os
from typing import Any, Mapping, Optional

from dotenv import load_dotenv


class DictConfigProvider:
    """Serve settings from an in-memory mapping (e.g. a JSON config section)."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None) -> None:
        self._values = dict(values or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)


class EnvConfigProvider:
    """Serve settings from ``SNEAKER_*`` environment variables.

    A ``.env`` file is loaded once on construction via python-dotenv so local
    setups can keep recipients and switches out of the repo.
    """

    def __init__(self, prefix: str = "SNEAKER_", dotenv: bool = True) -> None:
        self._prefix = prefix
        if dotenv:
            load_dotenv()

    def get(self, key: str, default: Any = None) -> Any:
        value = os.getenv(f"{self._prefix}{key.upper()}")
        # A blank variable counts as unset so it cannot mask config.json.
        if value is None or not value.strip():
            return default
        return value


class ChainConfigProvider:
    """Ask providers in order and return the first value that is set."""

    def __init__(self, *providers) -> None:
        self._providers = providers

    def get(self, key: str, default: Any = None) -> Any:
        for provider in self._providers:
            value = provider.get(key)
            if value is not None:
                return value
        return default
