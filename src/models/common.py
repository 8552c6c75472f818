"""
Helpers shared by the canonical models.

Timestamps across the models are epoch milliseconds; ``iso8601`` renders
them the same way everywhere.
"""

from datetime import datetime, timezone
from typing import Optional


def iso8601(timestamp_ms: Optional[int]) -> Optional[str]:
    """
    Render epoch milliseconds as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    Example:
        >>> iso8601(1533413083184)
        '2018-08-04T20:04:43.184Z'
    """
    if timestamp_ms is None:
        return None
    moment = datetime.fromtimestamp(timestamp_ms // 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{timestamp_ms % 1000:03d}Z"
