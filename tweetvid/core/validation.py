import re
from typing import Any

# Anything after the status id must start a new path segment, query or fragment.
_TAIL = r"(?:[/?#]\S*)?\Z"

TWEET_URL_PATTERNS = (
    re.compile(r"^https?://(?:www\.)?(?:twitter|x)\.com/\w+/status/\d+" + _TAIL, re.ASCII),
    re.compile(r"^https?://(?:www\.)?twitter\.com/i/web/status/\d+" + _TAIL, re.ASCII),
)


def is_valid_tweet_url(value: Any) -> bool:
    """Return True if value looks like a tweet status link."""
    if not isinstance(value, str) or not value:
        return False
    return any(pattern.match(value) for pattern in TWEET_URL_PATTERNS)
