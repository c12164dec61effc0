"""
TimeWindow resolution for the today/week/month timeframes.
"""

from datetime import datetime, timedelta

from ..models import Timeframe, TimeWindow, as_aware

# Days to step back from today's midnight for each timeframe
_LOOKBACK_DAYS = {
    Timeframe.TODAY: 0,
    Timeframe.WEEK: 7,
    Timeframe.MONTH: 30,
}


def resolve_time_window(timeframe: Timeframe, now: datetime) -> TimeWindow:
    """
    Convert a timeframe into a concrete window ending at the last instant of today.

    Args:
        timeframe: Requested timeframe
        now: Current moment; naive values are read as local time

    Returns:
        TimeWindow from midnight N days ago through 23:59:59.999 today
    """
    now = as_aware(now)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end = now.replace(hour=23, minute=59, second=59, microsecond=999000)
    start = midnight - timedelta(days=_LOOKBACK_DAYS[Timeframe(timeframe)])
    return TimeWindow(start=start, end=end)
