"""Core configuration dataclass and resolution.

Config loading lives in adapters; this module only defines the shape the core
expects and coerces whatever a provider returns into it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Tuple

from sneaker.core.capture import build_capture_list
from sneaker.core.errors import ConfigurationError
from sneaker.core.ports import ConfigProvider

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class NotifierConfig:
    """Resolved settings for one capture call."""

    silent: bool
    capture: Tuple[str, ...]
    ignore_duplicates: bool
    ignored_bots: FrozenSet[str]
    recipients: Tuple[str, ...]


def _coerce_bool(key: str, value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if not lowered:
            return default
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    raise ConfigurationError(f"Config value '{key}' must be a boolean, got {value!r}")


def _coerce_list(key: str, value: object) -> List[object]:
    if value is None:
        return []
    # Comma-separated strings keep env-based config usable.
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    raise ConfigurationError(f"Config value '{key}' must be a list, got {value!r}")


def _unique_strings(key: str, values: Iterable[object]) -> Tuple[str, ...]:
    result: List[str] = []
    for value in values:
        if not isinstance(value, str):
            raise ConfigurationError(f"Config value '{key}' must contain strings, got {value!r}")
        value = value.strip()
        if value and value not in result:
            result.append(value)
    return tuple(result)


def load_notifier_config(provider: ConfigProvider) -> NotifierConfig:
    """Resolve a NotifierConfig from a provider.

    Defaults mirror the capture pipeline's expectations: not silent, nothing
    captured, duplicates ignored unless explicitly disabled, no bot filter,
    and no recipients.
    """

    bots = _unique_strings("ignored_bots", _coerce_list("ignored_bots", provider.get("ignored_bots")))
    return NotifierConfig(
        silent=_coerce_bool("silent", provider.get("silent"), default=False),
        capture=build_capture_list(_coerce_list("capture", provider.get("capture"))),
        ignore_duplicates=_coerce_bool(
            "ignore_duplicates", provider.get("ignore_duplicates"), default=True
        ),
        ignored_bots=frozenset(bot.lower() for bot in bots),
        recipients=_unique_strings("to", _coerce_list("to", provider.get("to"))),
    )

