"""Text, URL, date and duration helpers shared by the source adapters."""

import html
import math
import re
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from dateutil import parser as date_parser

from newsdeck.core.constants import CHARS_PER_MINUTE

_WHITESPACE_RE = re.compile(r"\s+")
_ISO_DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$"
)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def clean_text(value: Any) -> str:
    """Coerce a provider value to a single-line string.

    HTML entities are unescaped and markup is stripped; non-string values
    become an empty string.
    """
    if not isinstance(value, str) or not value:
        return ""

    text = html.unescape(value)
    if "<" in text and ">" in text:
        text = BeautifulSoup(text, "html.parser").get_text(" ")
    return collapse_whitespace(text)


def validate_absolute_url(value: Any) -> str | None:
    """Return the value if it is a well-formed absolute http(s) URL.

    Anything else (relative paths, data URIs, blanks, non-strings) yields
    None so clients never render a broken link or image.
    """
    if not isinstance(value, str):
        return None

    candidate = value.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return None

    try:
        parsed = urlparse(candidate)
    except ValueError:
        return None

    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return candidate


def parse_published_at(value: Any) -> datetime:
    """Parse a provider timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings, free-form date strings, Unix timestamps and
    datetimes. Falls back to the current time when the value is missing or
    unparseable.
    """
    if not value:
        return datetime.now(timezone.utc)

    try:
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, (int, float)):
            parsed = datetime.fromtimestamp(value, tz=timezone.utc)
        elif isinstance(value, str):
            try:
                parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                parsed = date_parser.parse(value)
        else:
            return datetime.now(timezone.utc)
    except (ValueError, OverflowError, OSError):
        return datetime.now(timezone.utc)

    if parsed.tzinfo is None:
        # Providers that omit the offset report UTC
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def estimate_read_time(content: str) -> str:
    """Display read time at roughly 200 characters per minute, minimum one."""
    minutes = max(1, math.ceil(len(content or "") / CHARS_PER_MINUTE))
    return f"{minutes} min read"


def parse_iso8601_duration(value: Any) -> int | None:
    """Convert an ISO-8601 duration such as ``PT1H2M3S`` to seconds."""
    if not isinstance(value, str) or not value:
        return None

    match = _ISO_DURATION_RE.match(value.strip())
    if not match or not any(match.groupdict().values()):
        return None

    parts = {key: int(part) if part else 0 for key, part in match.groupdict().items()}
    return (
        parts["days"] * 86400
        + parts["hours"] * 3600
        + parts["minutes"] * 60
        + parts["seconds"]
    )


def format_duration(total_seconds: int) -> str:
    """Format seconds as ``H:MM:SS`` or ``M:SS``."""
    hours, remainder = divmod(max(0, total_seconds), 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def hostname_of(url: str | None) -> str:
    """Hostname without a leading ``www.``; empty string when unparseable."""
    if not url:
        return ""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return ""
    return host[4:] if host.startswith("www.") else host
