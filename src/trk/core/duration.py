"""Human readable durations."""

import re

_AGO_PATTERN = re.compile(r"^\s*(\d+)\s*([smh]?)\s*$", re.IGNORECASE)
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600}


def format_duration(seconds: int) -> str:
    """Format a duration in seconds.

    Minutes close to a full hour are banded: up to 4 minutes past are dropped
    and 56 to 59 minutes round up to the next hour.
    """
    if seconds < 0:
        raise ValueError(f"Duration must not be negative: {seconds}")

    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    remainder = seconds % 60

    if hours == 0:
        if minutes == 0:
            return "1 second" if remainder == 1 else f"{remainder} seconds"
        if minutes == 1:
            return "1 minute"
        return f"{minutes} minutes"

    if minutes <= 4:
        return "1 hour" if hours == 1 else f"{hours} hours"
    if minutes >= 56:
        return f"{hours + 1} hours"
    return f"{hours} hours and {minutes} minutes"


def parse_ago(text: str) -> int:
    """Parse an offset such as ``15m``, ``2h`` or ``90s`` into seconds.

    A bare number is read as minutes.
    """
    match = _AGO_PATTERN.match(text)
    if not match:
        raise ValueError(f"Invalid time offset: {text!r} (use e.g. 90s, 15m or 2h)")

    amount, unit = match.groups()
    return int(amount) * _UNIT_SECONDS[(unit or "m").lower()]
