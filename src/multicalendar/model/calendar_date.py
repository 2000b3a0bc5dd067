# SPDX-License-Identifier: MIT

from typing import TypedDict

import pendulum


class CalendarDate(TypedDict):
    date: pendulum.Date
    formatted_date: str
    is_past: bool
    is_today: bool
    is_weekend: bool


class MonthGroup(TypedDict):
    first_day_of_month: pendulum.Date
    days: list[CalendarDate]
