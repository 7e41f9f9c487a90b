"""Time source for trk.

Timestamps are whole seconds since the Unix epoch. Everything that needs the
current time goes through ``now()`` so it can be patched in tests.
"""

import time
from datetime import datetime

DATE_FORMAT = "%Y-%m-%d, %H:%M"


def now() -> int:
    """Get the current time in seconds since the epoch."""
    return int(time.time())


def format_timestamp(timestamp: int) -> str:
    """Format a timestamp as a local date and time."""
    return datetime.fromtimestamp(timestamp).strftime(DATE_FORMAT)
