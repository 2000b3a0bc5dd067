# SPDX-License-Identifier: MIT

import datetime
import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional

from yaml import load

try:
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Loader  # type: ignore[assignment]

from multicalendar import time
from multicalendar.model.day_cell import DayBatch, DayCell
from multicalendar.model.resource import CalendarResource, ResourceKey, resource_key

logger = logging.getLogger(__name__)


class YamlDataSource:
    """
    Serve grid data from a YAML file shaped like::

        resources:
          - {id: 1, name: Sea View}
        days:
          1:
            - {date: 2024-01-01, price: 120}
        events:
          1:
            - {id: b1, start: 2024-01-02, end: 2024-01-04, title: Smith}

    Events occupy the half-open span ``[start, end)`` and need an ``end``;
    an event without one is never served.

    ``load_missing_data`` matches the grid's data source signature.
    """

    def __init__(self, path: Path, tz: str = "local") -> None:
        self.path = path
        self.tz = tz
        self._resources: Optional[list[CalendarResource]] = None
        self._days: dict[ResourceKey, list[DayCell]] = {}
        self._events: dict[ResourceKey, list[dict[str, Any]]] = {}
        self.request_count = 0

    @property
    def resources(self) -> list[CalendarResource]:
        if self._resources is None:
            self.__load_data()
        if self._resources is None:
            raise ValueError()
        return deepcopy(self._resources)

    def __load_data(self) -> None:
        raw = load(self.path.read_text(), Loader=Loader)
        if not isinstance(raw, dict):
            raise ValueError(f"{self.path} does not hold a mapping")

        self._resources = list(raw.get("resources") or [])
        self._days = {
            key: [self.__convert_day_for_grid(day) for day in days or []]
            for key, days in (raw.get("days") or {}).items()
        }
        self._events = {
            key: [self.__convert_event_for_grid(event) for event in events or []]
            for key, events in (raw.get("events") or {}).items()
        }

    def __convert_day_for_grid(self, day: dict[str, Any]) -> DayCell:
        converted = dict(day)
        converted["date"] = _date_str(day["date"])
        return converted

    def __convert_event_for_grid(self, event: dict[str, Any]) -> dict[str, Any]:
        converted = dict(event)
        for field in ("start", "end"):
            if isinstance(converted.get(field), datetime.date):
                converted[field] = time.datetime_from_value(converted[field], self.tz)
        return converted

    async def load_missing_data(
        self, resources: list[CalendarResource], start: str, end: str
    ) -> list[DayBatch]:
        if self._resources is None:
            self.__load_data()
        self.request_count += 1

        start_date = time.date_from_ymd_str(start)
        end_date = time.date_from_ymd_str(end)
        window_start = time.day_start(start_date, self.tz)
        window_end = time.day_start(end_date.add(days=1), self.tz)

        batches: list[DayBatch] = []
        for resource in resources:
            key = resource_key(resource)
            known_days = {day["date"]: day for day in self._days.get(key, [])}
            days: list[DayCell] = []
            for offset in range(time.days_between(start_date, end_date) + 1):
                date_str = time.date_to_ymd_str(start_date.add(days=offset))
                days.append(deepcopy(known_days.get(date_str, {"date": date_str})))
            events = []
            for event in self._events.get(key, []):
                if event.get("end") is None:
                    logger.debug("Skipping event %r without an end", event.get("id"))
                    continue
                event_start = time.datetime_from_value(event["start"], self.tz)
                event_end = time.datetime_from_value(event["end"], self.tz)
                if event_start < window_end and window_start < event_end:
                    events.append(deepcopy(event))
            batches.append({"resource_key": key, "day_data": days, "event_data": events})

        logger.debug(
            "Served %s..%s for %d resource(s) from %s",
            start,
            end,
            len(resources),
            self.path,
        )
        return batches


def _date_str(value: Any) -> str:
    if isinstance(value, datetime.date):
        return time.date_to_ymd_str(time.to_date(value))
    return str(value)[:10]
