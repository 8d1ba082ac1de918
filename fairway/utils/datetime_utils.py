"""
Timezone-aware UTC timestamps for read_at, responded_at and updated_at columns.
"""

from datetime import datetime
import pytz


def utcnow() -> datetime:
    """Current time in UTC, tz-aware."""
    return datetime.now(pytz.UTC)
