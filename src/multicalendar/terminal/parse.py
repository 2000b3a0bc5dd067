# SPDX-License-Identifier: MIT

import re
from typing import Optional

import pendulum
import typer

from multicalendar import time


def parse_date(date_param: Optional[str]) -> Optional[pendulum.Date]:
    """
    Parse a date option.

    Accepts YYYY-MM-DD, today/t, yesterday/y, tomorrow/o, or a day offset
    from today such as 1 or -7.
    """
    if date_param is None:
        return None

    date = str(date_param)

    if re.match(r"^\d{4}-\d{2}-\d{2}$", date):
        try:
            return time.date_from_ymd_str(date)
        except ValueError as e:
            raise typer.BadParameter(f"Invalid date: {e}")

    if re.match(r"^-?\d+$", date):
        return time.today_local().add(days=int(date))

    if date == "today" or date == "t":
        return time.today_local()
    if date == "yesterday" or date == "y":
        return time.today_local().subtract(days=1)
    if date == "tomorrow" or date == "o":
        return time.today_local().add(days=1)
    raise typer.BadParameter("Incorrect date format")


def parse_resource_id(resource_id: str) -> int | str:
    """Resource ids read from YAML are ints when they look like ints."""
    if re.match(r"^-?\d+$", resource_id):
        return int(resource_id)
    return resource_id
