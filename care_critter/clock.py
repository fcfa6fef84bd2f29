"""Calendar and wall-clock helpers. All inputs are caller-supplied timestamps."""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from care_critter.constants import MINUTE_MS

if TYPE_CHECKING:
    from care_critter.types import Millis, SleepWindow


def _local(ts: Millis) -> datetime:
    return datetime.fromtimestamp(ts / 1000)


def calendar_day_key(ts: Millis) -> str:
    """Local date of *ts* as ``YYYY-MM-DD``; the daily-reset gate."""
    return _local(ts).date().isoformat()


def minutes_of_day(ts: Millis) -> int:
    moment = _local(ts)
    return moment.hour * 60 + moment.minute


def parse_clock(text: str) -> int:
    """Minutes past midnight for ``HH:MM``. Malformed input maps to 0."""
    hours, sep, minutes = text.partition(":")
    if not sep:
        return 0
    try:
        h, m = int(hours), int(minutes)
    except ValueError:
        return 0
    if not (0 <= h <= 23 and 0 <= m <= 59):
        return 0
    return h * 60 + m


def is_valid_clock(text: object) -> bool:
    if not isinstance(text, str):
        return False
    hours, sep, minutes = text.partition(":")
    if not sep or not hours.isdigit() or not minutes.isdigit():
        return False
    return 0 <= int(hours) <= 23 and 0 <= int(minutes) <= 59


def is_within_sleep_window(ts: Millis, window: SleepWindow) -> bool:
    """Check *ts* against a window that may wrap past midnight.

    ``start == end`` is treated as a window that is always open.
    """
    now = minutes_of_day(ts)
    start = parse_clock(window.start)
    end = parse_clock(window.end)

    if start == end:
        return True
    if start < end:
        return start <= now < end
    return now >= start or now < end


def can_sleep_now(ts: Millis, window: SleepWindow, parent_override_sleep: bool) -> bool:
    if parent_override_sleep:
        return True
    return is_within_sleep_window(ts, window)


def age_in_days(created_ts: Millis, now_ts: Millis) -> int:
    """Whole local calendar days between the two timestamps (never negative).

    A pet created at 23:59 is one day old at 00:01.
    """
    days = (_local(now_ts).date() - _local(created_ts).date()).days
    return max(0, days)


def elapsed_minutes(last_ts: Millis, now_ts: Millis) -> float:
    return max(0.0, (now_ts - last_ts) / MINUTE_MS)
