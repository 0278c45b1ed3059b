"""Deduplication helpers (core domain)."""

from __future__ import annotations

import hashlib
from datetime import date, datetime
from typing import Union

DAY_KEY_FORMAT = "%d.%m.%Y"


def compute_fingerprint(message: str, file: str, line: int) -> str:
    """Return the hex fingerprint identifying an exception for same-day dedup."""

    payload = f"{message}{file}{line}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def day_key(moment: Union[date, datetime]) -> str:
    """Return the ledger partition key (``DD.MM.YYYY``) for a moment."""

    return moment.strftime(DAY_KEY_FORMAT)


def parse_day_key(key: str) -> date:
    """Parse a day key back into a date; raises ValueError on foreign keys."""

    return datetime.strptime(key, DAY_KEY_FORMAT).date()
