"""Crawler detection used to keep bots out of session and request tracking."""

import re
from typing import Optional

from user_agents import parse as ua_parse


BOT_PATTERNS = (
    "crawler",
    "spider",
    "scraper",
    "slurp",
    "curl",
    "wget",
    "python-requests",
    "headless",
    "phantom",
    "lighthouse",
)

# "bot" as a word or a product token ("Googlebot/2.1"), not inside device names like "CUBOT"
_BOT_TOKEN_RE = re.compile(r"\bbot\b|bot/")


def is_bot(user_agent: Optional[str]) -> bool:
    """Return True when the user agent belongs to an automated client."""
    if not user_agent:
        return False

    ua_lower = user_agent.lower()
    if _BOT_TOKEN_RE.search(ua_lower) or any(pattern in ua_lower for pattern in BOT_PATTERNS):
        return True
    return ua_parse(user_agent).is_bot
