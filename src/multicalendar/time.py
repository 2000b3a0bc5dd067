# SPDX-License-Identifier: MIT

import datetime
from typing import Optional, Union, cast

import pendulum

YMD_FORMAT = "YYYY-MM-DD"

DateLike = Union[pendulum.Date, datetime.date, str]


def today_local(tz: str = "local") -> pendulum.Date:
    return pendulum.today(tz).date()


def date_to_ymd_str(date: pendulum.Date) -> str:
    return date.format(YMD_FORMAT)


def date_from_ymd_str(date_str: str) -> pendulum.Date:
    """Parse a 'YYYY-MM-DD' string (or the date part of an ISO datetime)."""
    parsed = pendulum.parse(date_str[:10], exact=True)
    if not isinstance(parsed, pendulum.Date):
        raise ValueError(f"Not a calendar date: {date_str!r}")
    return cast(pendulum.Date, parsed)


def to_date(value: DateLike) -> pendulum.Date:
    if isinstance(value, str):
        return date_from_ymd_str(value)
    if isinstance(value, datetime.datetime):
        return pendulum.date(value.year, value.month, value.day)
    if isinstance(value, pendulum.Date):
        return value
    return pendulum.date(value.year, value.month, value.day)


def to_date_optional(value: Optional[DateLike]) -> Optional[pendulum.Date]:
    if value is None:
        return None
    return to_date(value)


def datetime_from_value(
    value: Union[str, datetime.datetime, datetime.date], tz: str = "UTC"
) -> pendulum.DateTime:
    """Coerce an event boundary into an aware pendulum.DateTime.

    Date-only values are read as midnight in ``tz``; strings without an
    offset are read in ``tz`` as well.
    """
    if isinstance(value, str):
        return cast(pendulum.DateTime, pendulum.parse(value, tz=tz))
    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            return pendulum.instance(value, tz=tz)
        return pendulum.instance(value)
    return day_start(to_date(value), tz)


def day_start(date: pendulum.Date, tz: str = "local") -> pendulum.DateTime:
    return pendulum.datetime(date.year, date.month, date.day, tz=tz)


def days_between(start: datetime.date, end: datetime.date) -> int:
    """Signed number of calendar days from ``start`` to ``end``."""
    return end.toordinal() - start.toordinal()


def local_date(value: pendulum.DateTime, tz: str = "local") -> pendulum.Date:
    return value.in_timezone(tz).date()


def whole_days_between(
    start: pendulum.DateTime, end: pendulum.DateTime, tz: str = "local"
) -> int:
    """Signed number of whole calendar days from ``start`` to ``end`` in ``tz``.

    Days are counted on the wall clock, so a 23 or 25 hour day around a
    daylight saving change still counts as one.
    """
    return start.in_timezone(tz).diff(end.in_timezone(tz), False).in_days()
