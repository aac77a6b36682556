# bakery/reporting/weeks.py
"""
Bakery week boundaries.

Orders are baked in weekly batches. The order cutoff is Wednesday 16:00,
so a bakery week runs from one Wednesday 16:00 to the next:

  - Wednesday 16:00:00 exactly still belongs to the week that is ending.
  - Anything strictly after 16:00:00 on Wednesday starts the new week.

Week starts are reported as Wednesday 16:01:00 so that an order stamped
at exactly 16:00:00 is never counted in two windows.

All functions work in the tzinfo of the datetime they receive (naive in,
naive out). Callers pass bakery-local time.
"""

from datetime import datetime, time, timedelta

WEDNESDAY = 2  # datetime.weekday()
CUTOFF_TIME = time(16, 0)
WEEK_START_TIME = time(16, 1)
WEEK_LENGTH = timedelta(days=7)


def current_week_start(now: datetime | None = None) -> datetime:
    """
    Start of the bakery week containing `now`.

    Examples (2024-01-10 is a Wednesday):
        2024-01-10 16:00:00 -> 2024-01-03 16:01
        2024-01-10 16:00:01 -> 2024-01-10 16:01
        2024-01-12 09:00:00 -> 2024-01-10 16:01
    """
    if now is None:
        now = datetime.now()

    days_since_wednesday = (now.weekday() - WEDNESDAY) % 7
    boundary = now.date() - timedelta(days=days_since_wednesday)

    if days_since_wednesday == 0 and now.time() <= CUTOFF_TIME:
        boundary -= WEEK_LENGTH

    return datetime.combine(boundary, WEEK_START_TIME, tzinfo=now.tzinfo)


def next_week_start(reference: datetime | None = None) -> datetime:
    """
    Start of the bakery week after the one containing `reference`.
    """
    return current_week_start(reference) + WEEK_LENGTH


def week_window(
    reference: datetime | None = None,
    offset: int = 0,
) -> tuple[datetime, datetime]:
    """
    Half-open `[start, end)` window of a bakery week.

    Args:
        reference: any instant inside the anchor week (defaults to now)
        offset: whole weeks to move from the anchor; -1 is last week

    Returns:
        (week_start, week_end)
    """
    start = current_week_start(reference) + offset * WEEK_LENGTH
    return start, start + WEEK_LENGTH
