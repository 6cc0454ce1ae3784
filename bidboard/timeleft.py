"""Minutes-remaining arithmetic and the tiered "time left" label.

The same ``format_time_left`` is used for values computed at scrape time and
for values recomputed at render time from ``auctionEnd``.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional

from bidboard.core import PropertyRecord

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 1440


def parse_auction_end(auction_end: str) -> Optional[datetime]:
    """ISO-8601 → aware datetime. Naive stamps are taken as UTC; junk → None."""
    try:
        dt = datetime.fromisoformat(auction_end)
    except (TypeError, ValueError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def minutes_remaining(
    auction_end: Optional[str], now: Optional[datetime] = None
) -> Optional[int]:
    """Signed whole minutes from ``now`` until ``auction_end``.

    Rounds to the nearest minute with halves going up (-2.5 -> -2, 2.5 -> 3).
    Returns None when there is no end stamp or it cannot be parsed.
    """
    if not auction_end:
        return None
    end = parse_auction_end(auction_end)
    if end is None:
        return None
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    delta = (end - now).total_seconds() / 60
    return math.floor(delta + 0.5)


def format_time_left(minutes_left: Optional[int]) -> str:
    if minutes_left is None:
        return ""
    if minutes_left < 0:
        return "Expired"
    if minutes_left == 0:
        return "Ending now"
    if minutes_left < MINUTES_PER_HOUR:
        return f"{minutes_left} min"
    if minutes_left < MINUTES_PER_DAY:
        hours, mins = divmod(minutes_left, MINUTES_PER_HOUR)
        return f"{hours}h {mins}m"
    days, rest = divmod(minutes_left, MINUTES_PER_DAY)
    return f"{days}d {rest // MINUTES_PER_HOUR}h"


def live_minutes_left(
    record: PropertyRecord, now: Optional[datetime] = None
) -> Optional[int]:
    """Minutes left as of ``now`` for a record captured earlier.

    Ended records always read as expired; otherwise the end stamp wins over
    the stored value so a stale table still counts down.
    """
    if record.status.is_ended:
        return -1
    if record.auction_end:
        live = minutes_remaining(record.auction_end, now)
        if live is not None:
            return live
    return record.minutes_left
