# SPDX-License-Identifier: MIT

import datetime
from typing import Iterator, Optional, Sequence

import pendulum

from multicalendar import time
from multicalendar.model.calendar_date import CalendarDate, MonthGroup


class DateIndex:
    """
    An ordered, contiguous run of calendar days with a date string lookup.

    Built once per range configuration. Index ``i`` always holds
    ``start + i days``. Exposed collections are tuples or copies so callers
    cannot reshape the index.
    """

    def __init__(
        self,
        dates: Sequence[CalendarDate],
        month_groups: Sequence[MonthGroup],
        today: pendulum.Date,
    ) -> None:
        self.today = today
        self._dates = tuple(dates)
        self._index_by_date_string = {
            date["formatted_date"]: index for index, date in enumerate(self._dates)
        }
        self._month_groups = tuple(month_groups)

    def __len__(self) -> int:
        return len(self._dates)

    def __iter__(self) -> Iterator[CalendarDate]:
        return iter(self._dates)

    @property
    def dates(self) -> tuple[CalendarDate, ...]:
        return self._dates

    @property
    def index_by_date_string(self) -> dict[str, int]:
        return dict(self._index_by_date_string)

    @property
    def month_groups(self) -> tuple[MonthGroup, ...]:
        return self._month_groups

    @property
    def start(self) -> Optional[pendulum.Date]:
        if not self._dates:
            return None
        return self._dates[0]["date"]

    @property
    def end(self) -> Optional[pendulum.Date]:
        if not self._dates:
            return None
        return self._dates[-1]["date"]

    def index_of(self, value: time.DateLike) -> Optional[int]:
        if isinstance(value, str):
            return self._index_by_date_string.get(value[:10])
        return self._index_by_date_string.get(time.date_to_ymd_str(time.to_date(value)))

    def date_at(self, index: int) -> CalendarDate:
        if index < 0 or index >= len(self._dates):
            raise IndexError(f"date index {index} outside [0, {len(self._dates)})")
        return self._dates[index]

    def days_from_start(self, value: time.DateLike) -> int:
        """Signed day distance from the first day of the range, 0 when empty."""
        if not self._dates:
            return 0
        return time.days_between(self._dates[0]["date"], time.to_date(value))


def build_range(
    start: time.DateLike,
    end: time.DateLike,
    today: Optional[time.DateLike] = None,
    tz: str = "local",
) -> DateIndex:
    """
    Build the day sequence for ``[start, end]`` (both inclusive).

    Args:
        start: First day of the range
        end: Last day of the range, must not be before start
        today: Reference day for is_past/is_today (defaults to today in tz)
        tz: Timezone used to resolve today when it is not given

    Returns:
        A DateIndex over every day of the range
    """
    start_date = time.to_date(start)
    end_date = time.to_date(end)
    if end_date < start_date:
        raise ValueError(
            f"range end {time.date_to_ymd_str(end_date)} is before start "
            f"{time.date_to_ymd_str(start_date)}"
        )
    today_date = time.to_date(today) if today is not None else time.today_local(tz)

    dates: list[CalendarDate] = []
    for offset in range(time.days_between(start_date, end_date) + 1):
        date = start_date.add(days=offset)
        dates.append(
            {
                "date": date,
                "formatted_date": time.date_to_ymd_str(date),
                "is_past": date < today_date,
                "is_today": date == today_date,
                "is_weekend": date.isoweekday() >= 6,
            }
        )

    return DateIndex(dates, group_by_month(dates), today_date)


def build_range_from_months(
    past_months: int = 1,
    future_months: int = 24,
    today: Optional[time.DateLike] = None,
    tz: str = "local",
) -> DateIndex:
    """Build the default range running from ``past_months`` before today to
    ``future_months`` after it."""
    if past_months < 0 or future_months < 0:
        raise ValueError("month counts must not be negative")
    today_date = time.to_date(today) if today is not None else time.today_local(tz)
    return build_range(
        today_date.subtract(months=past_months),
        today_date.add(months=future_months),
        today=today_date,
        tz=tz,
    )


def group_by_month(dates: Sequence[CalendarDate]) -> list[MonthGroup]:
    groups: list[MonthGroup] = []
    for date in dates:
        day = date["date"]
        if not groups or not _same_month(groups[-1]["first_day_of_month"], day):
            groups.append({"first_day_of_month": day.start_of("month"), "days": []})
        groups[-1]["days"].append(date)
    return groups


def _same_month(a: datetime.date, b: datetime.date) -> bool:
    return a.year == b.year and a.month == b.month
