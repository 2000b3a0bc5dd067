# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from typing import Any, Iterable, Optional, Sequence

from multicalendar import time
from multicalendar.model.day_cell import DayBatch, DayCell
from multicalendar.model.event import EventInfo
from multicalendar.model.missing_data import MissingData
from multicalendar.model.resource import CalendarResource, ResourceKey, resource_key
from multicalendar.service.date_index import DateIndex

logger = logging.getLogger(__name__)

EVENT_FIELDS = ("id", "start", "end")


class DataCache:
    """
    Sparse day cell and event storage for a resource x date grid.

    Cells are keyed by (resource key, date index); a missing cell is what
    marks data as not loaded yet. Every mutation rebinds fresh top-level
    maps and accessors hand out copies, so nothing outside the cache holds a
    live reference into its state.

    Fetch responses carry the generation returned by ``next_generation``.
    A cell remembers the generation that last wrote or cleared it and only a
    strictly newer response may overwrite it; responses issued before the
    last resource reset are discarded.
    """

    def __init__(
        self,
        date_index: DateIndex,
        resources: Optional[Sequence[CalendarResource]] = None,
        tz: str = "local",
    ) -> None:
        self._date_index = date_index
        self.tz = tz
        self._resources: tuple[CalendarResource, ...] = ()
        self._index_by_key: dict[ResourceKey, int] = {}
        self._day_data: dict[ResourceKey, dict[int, DayCell]] = {}
        self._cell_generation: dict[ResourceKey, dict[int, int]] = {}
        self._events: dict[ResourceKey, list[EventInfo]] = {}
        self._issued_generation = 0
        self._reset_generation = 0
        self.set_resources(resources or [])

    @property
    def date_index(self) -> DateIndex:
        return self._date_index

    @property
    def resources(self) -> list[CalendarResource]:
        return list(self._resources)

    @property
    def resource_keys(self) -> list[ResourceKey]:
        return [resource_key(resource) for resource in self._resources]

    @property
    def issued_generation(self) -> int:
        return self._issued_generation

    def next_generation(self) -> int:
        self._issued_generation += 1
        return self._issued_generation

    def has_resource(self, key: ResourceKey) -> bool:
        return key in self._index_by_key

    def resource_at(self, index: int) -> CalendarResource:
        return self._resources[index]

    def resource_for_key(self, key: ResourceKey) -> Optional[CalendarResource]:
        index = self._index_by_key.get(key)
        if index is None:
            return None
        return self._resources[index]

    def set_resources(self, resources: Sequence[CalendarResource]) -> None:
        """Replace the resource set, discarding every cached cell and event."""
        index_by_key: dict[ResourceKey, int] = {}
        for index, resource in enumerate(resources):
            key = resource_key(resource)
            if key in index_by_key:
                raise ValueError(f"duplicate resource key {key!r}")
            index_by_key[key] = index

        self._resources = tuple(resources)
        self._index_by_key = index_by_key
        self._day_data = {key: {} for key in index_by_key}
        self._cell_generation = {key: {} for key in index_by_key}
        self._events = {key: [] for key in index_by_key}
        self._reset_generation = self._issued_generation

    def get_day(self, key: ResourceKey, date_index: int) -> Optional[DayCell]:
        cell = self._day_data.get(key, {}).get(date_index)
        if cell is None:
            return None
        return deepcopy(cell)

    def has_day(self, key: ResourceKey, date_index: int) -> bool:
        return date_index in self._day_data.get(key, {})

    def get_days(self, key: ResourceKey) -> dict[int, DayCell]:
        return deepcopy(self._day_data.get(key, {}))

    def get_events(self, key: ResourceKey) -> list[EventInfo]:
        return deepcopy(self._events.get(key, []))

    def get_missing_data_to_load(
        self, visible_resource_indexes: Iterable[int], col_start: int, col_end: int
    ) -> Optional[MissingData]:
        """
        Find the visible cells that are not loaded yet.

        Any absent cell marks its resource as missing and widens one bounding
        date window shared by all resources, so the result over-fetches
        rather than listing exact cells; the data source is range based.

        Returns:
            The missing resources and the aggregate [start, end] window, or
            None when every visible cell is present
        """
        first_column = max(col_start, 0)
        last_column = min(col_end, len(self._date_index) - 1)
        if last_column < first_column:
            return None

        missing_resources: list[CalendarResource] = []
        missing_keys: set[ResourceKey] = set()
        start_index: Optional[int] = None
        end_index: Optional[int] = None

        for row in visible_resource_indexes:
            if row < 0 or row >= len(self._resources):
                continue
            resource = self._resources[row]
            key = resource_key(resource)
            cells = self._day_data[key]
            for column in range(first_column, last_column + 1):
                if column in cells:
                    continue
                if key not in missing_keys:
                    missing_keys.add(key)
                    missing_resources.append(resource)
                start_index = column if start_index is None else min(start_index, column)
                end_index = column if end_index is None else max(end_index, column)

        if start_index is None or end_index is None:
            return None

        return {
            "resources": missing_resources,
            "start": self._date_index.date_at(start_index)["formatted_date"],
            "end": self._date_index.date_at(end_index)["formatted_date"],
        }

    def add_days_and_event_data(
        self, batches: Iterable[DayBatch], generation: Optional[int] = None
    ) -> None:
        """
        Merge fetched day cells and events into the cache.

        Cells land at the index of their date; dates outside the range are
        dropped. Events merge by id (known ids are skipped) and each touched
        resource's events are re-sorted by start. Applying the same batch
        twice leaves the cache as applying it once. A record that cannot be
        converted raises and leaves the cache unchanged.

        Args:
            batches: Per-resource payloads
            generation: Generation of the fetch that produced the batches, or
                None for data pushed directly by the host
        """
        if generation is not None and generation <= self._reset_generation:
            logger.debug(
                "Discarding batch from generation %s issued before the resource reset",
                generation,
            )
            return

        stamp = self._issued_generation if generation is None else generation
        day_data = dict(self._day_data)
        cell_generation = dict(self._cell_generation)
        events = dict(self._events)

        for batch in batches:
            key = batch["resource_key"]
            if key not in day_data:
                logger.debug("Ignoring batch for unknown resource %r", key)
                continue

            cells = dict(day_data[key])
            generations = dict(cell_generation[key])
            for day in batch.get("day_data", []):
                index = self._date_index.index_of(day["date"])
                if index is None:
                    logger.debug("Dropping day %s outside the date range", day["date"])
                    continue
                if generation is not None and generations.get(index, 0) >= generation:
                    continue
                cells[index] = deepcopy(day)
                generations[index] = stamp
            day_data[key] = cells
            cell_generation[key] = generations

            if "event_data" in batch:
                events[key] = self.__merge_events(events[key], batch["event_data"])

        self._day_data = day_data
        self._cell_generation = cell_generation
        self._events = events

    def clear_days_data(
        self, key: ResourceKey, start_date: time.DateLike, end_date: time.DateLike
    ) -> None:
        """Drop the cells of ``[start_date, end_date]`` so they load again."""
        if key not in self._day_data:
            return

        start = time.to_date(start_date)
        end = time.to_date(end_date)
        cells = dict(self._day_data[key])
        generations = dict(self._cell_generation[key])
        for offset in range(time.days_between(start, end) + 1):
            index = self._date_index.index_of(start.add(days=offset))
            if index is None:
                continue
            cells.pop(index, None)
            # Responses issued before the invalidation must not refill it.
            generations[index] = self._issued_generation

        self._day_data = {**self._day_data, key: cells}
        self._cell_generation = {**self._cell_generation, key: generations}

    def __merge_events(
        self, existing: list[EventInfo], raw_events: Iterable[dict[str, Any]]
    ) -> list[EventInfo]:
        merged = list(existing)
        known_ids = {event["id"] for event in merged}
        for raw_event in raw_events:
            event = self.__convert_event_for_cache(raw_event)
            if event is None or event["id"] in known_ids:
                continue
            known_ids.add(event["id"])
            merged.append(event)
        merged.sort(key=lambda event: event["start"])
        return merged

    def __convert_event_for_cache(self, raw_event: dict[str, Any]) -> Optional[EventInfo]:
        if raw_event.get("id") is None or raw_event.get("start") is None:
            logger.warning("Skipping event without id or start: %r", raw_event)
            return None
        start = time.datetime_from_value(raw_event["start"], self.tz)
        end = start
        if raw_event.get("end") is not None:
            end = time.datetime_from_value(raw_event["end"], self.tz)
        else:
            logger.debug(
                "Event %r has no end, it occupies no time and is never laid out",
                raw_event["id"],
            )
        return {
            "id": raw_event["id"],
            "start": start,
            "end": end,
            "data": {
                field: deepcopy(value)
                for field, value in raw_event.items()
                if field not in EVENT_FIELDS
            },
        }
