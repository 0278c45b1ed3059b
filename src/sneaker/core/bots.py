"""Crawler detection for request-bound exceptions (core domain)."""

from __future__ import annotations

from typing import AbstractSet, Optional


def is_from_bot(user_agent: Optional[str], ignored_bots: AbstractSet[str]) -> bool:
    """Return True when the user agent contains any ignored bot token.

    An absent agent cannot be classified, so it is treated as human. Tokens
    are expected lower-cased; the agent is lowered here before the substring
    check.
    """

    if not user_agent:
        return False

    agent = user_agent.lower()
    return any(bot in agent for bot in ignored_bots if bot)
