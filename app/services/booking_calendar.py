"""
Which calendar days can be booked
"""

from datetime import date, timedelta
from typing import Iterable, List

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def is_bookable_day(day: date, weekdays: Iterable[int]) -> bool:
    return day.weekday() in set(weekdays)


def describe_weekdays(weekdays: Iterable[int]) -> str:
    names = [WEEKDAY_NAMES[d] for d in sorted(set(weekdays)) if 0 <= d <= 6]
    return ", ".join(names) if names else "no days"


def upcoming_booking_dates(today: date, weekdays: Iterable[int], count: int) -> List[date]:
    """Next `count` bookable dates, starting with today if it qualifies"""
    allowed = {d for d in weekdays if 0 <= d <= 6}
    if not allowed or count <= 0:
        return []

    dates = []
    day = today
    while len(dates) < count:
        if day.weekday() in allowed:
            dates.append(day)
        day += timedelta(days=1)
    return dates
