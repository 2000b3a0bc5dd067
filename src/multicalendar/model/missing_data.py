# SPDX-License-Identifier: MIT

from typing import TypedDict

from multicalendar.model.resource import CalendarResource


class MissingData(TypedDict):
    resources: list[CalendarResource]
    start: str
    end: str
