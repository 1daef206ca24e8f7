"""
Duration string parsing.

Accepts compact duration strings such as "24h", "168h", "1h30m" or "1.5d"
and turns them into timedelta objects.
"""

import re
from datetime import timedelta


class DurationError(ValueError):
    """Raised when a duration string cannot be parsed."""


UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
}

_PART_RE = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h|d)")


def parse_duration(text: str) -> timedelta:
    """Parse a duration string into a timedelta.

    Args:
        text: Duration such as "24h", "1h30m", "-5m" or "0"

    Returns:
        Parsed duration

    Raises:
        DurationError: If the string is empty or malformed
    """
    if not isinstance(text, str):
        raise DurationError(f"invalid duration {text!r}")

    value = text
    sign = 1
    if value[:1] in ("+", "-"):
        if value[0] == "-":
            sign = -1
        value = value[1:]

    if value == "0":
        return timedelta(0)
    if not value:
        raise DurationError(f"invalid duration {text!r}")

    total = 0.0
    pos = 0
    while pos < len(value):
        match = _PART_RE.match(value, pos)
        if not match:
            raise DurationError(f"invalid duration {text!r}")
        number, unit = match.groups()
        total += float(number) * UNIT_SECONDS[unit]
        pos = match.end()

    try:
        return timedelta(seconds=sign * total)
    except (OverflowError, ValueError):
        raise DurationError(f"duration {text!r} is out of range") from None


def format_duration(delta: timedelta) -> str:
    """Render a timedelta as hours, minutes and seconds, e.g. "240h0m0s"."""
    seconds = delta.total_seconds()
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)

    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if secs == int(secs):
        secs_text = str(int(secs))
    else:
        secs_text = f"{secs:.3f}".rstrip("0")

    if hours:
        return f"{sign}{int(hours)}h{int(minutes)}m{secs_text}s"
    if minutes:
        return f"{sign}{int(minutes)}m{secs_text}s"
    return f"{sign}{secs_text}s"
