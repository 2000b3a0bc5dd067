# SPDX-License-Identifier: MIT

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

import pendulum

from multicalendar import time
from multicalendar.configuration import Configuration, default_configuration
from multicalendar.model.calendar_date import MonthGroup
from multicalendar.model.day_cell import DayBatch
from multicalendar.model.event import EventLayout
from multicalendar.model.missing_data import MissingData
from multicalendar.model.render import (
    DragHandlers,
    GridFrame,
    GridRenderer,
    MonthHeaderFrame,
    RowFrame,
)
from multicalendar.model.resource import CalendarResource, ResourceKey, resource_key
from multicalendar.model.selection import Selection, SelectionCommit
from multicalendar.model.viewport import ContainerSize, Viewport
from multicalendar.repository.data_cache import DataCache
from multicalendar.service.date_index import DateIndex, build_range_from_months
from multicalendar.service.debounce import Debouncer
from multicalendar.service.event_layout import (
    event_position_style,
    layout_visible_events,
    row_pixel_height,
)
from multicalendar.service.selection import DateRangeSelectedCallback, SelectionController
from multicalendar.service.viewport import ViewportTracker

logger = logging.getLogger(__name__)

LoadMissingData = Callable[
    [list[CalendarResource], str, str], Awaitable[Sequence[DayBatch]]
]


class MissingDataFetchError(Exception):
    """Loading a missing window failed or returned unusable data. The cache is untouched."""

    def __init__(self, missing: MissingData, generation: int) -> None:
        self.missing = missing
        self.generation = generation
        keys = [resource_key(resource) for resource in missing["resources"]]
        super().__init__(
            f"Failed to load {missing['start']}..{missing['end']} for resources {keys}"
        )


ErrorCallback = Callable[[MissingDataFetchError], None]


class MultiCalendarGrid:
    """
    State of one resource x date calendar grid.

    Wires the date index, viewport tracker, data cache, event layout and
    selection together. Scroll, resize and pointer handlers are synchronous;
    the only suspension point is the data source call, which runs as an
    asyncio task per fetch generation. Handlers that schedule work
    (``mount``, ``on_scroll``, ``on_resize``, ``set_resources``,
    ``calendar_updated``) must run on the event loop.
    """

    def __init__(
        self,
        resources: Sequence[CalendarResource],
        on_load_missing_data: LoadMissingData,
        on_error: Optional[ErrorCallback] = None,
        on_date_range_selected: Optional[DateRangeSelectedCallback] = None,
        date_index: Optional[DateIndex] = None,
        past_months_to_render: int = 1,
        future_months_to_render: int = 24,
        day_cell_width: float = 70,
        day_cell_height: float = 40,
        event_row_height: float = 40,
        resource_row_height: float = 45,
        column_gap: float = 4,
        overscan: int = 3,
        allow_selection: bool = True,
        allow_select_in_past: bool = False,
        fetch_debounce: float = 0.1,
        resize_settle: float = 0.1,
        tz: str = "local",
    ) -> None:
        if event_row_height <= 0:
            raise ValueError("event row height must be positive")

        self.tz = tz
        self.day_cell_width = day_cell_width
        self.day_cell_height = day_cell_height
        self.event_row_height = event_row_height
        self.column_gap = column_gap

        self._on_load_missing_data = on_load_missing_data
        self._on_error = on_error

        self._date_index = (
            date_index
            if date_index is not None
            else build_range_from_months(
                past_months_to_render, future_months_to_render, tz=tz
            )
        )
        self._cache = DataCache(self._date_index, resources, tz=tz)
        self._viewport = ViewportTracker(
            cell_width=day_cell_width,
            cell_height=day_cell_height,
            resource_row_height=resource_row_height,
            resource_count=len(resources),
            date_count=len(self._date_index),
            gap=column_gap,
            overscan=overscan,
        )
        self._selection = SelectionController(
            self._date_index,
            self._cache.resource_for_key,
            on_date_range_selected=on_date_range_selected,
            allow_selection=allow_selection,
            allow_select_in_past=allow_select_in_past,
        )
        self._fetch_debouncer = Debouncer(fetch_debounce)
        self._resize_debouncer = Debouncer(resize_settle)
        self._fetch_tasks: dict[int, asyncio.Task[None]] = {}
        self._hovered_date_index: Optional[int] = None

    @classmethod
    def from_configuration(
        cls,
        config: Configuration,
        resources: Sequence[CalendarResource],
        on_load_missing_data: LoadMissingData,
        **kwargs: Any,
    ) -> "MultiCalendarGrid":
        merged = default_configuration()
        merged.update(config)
        return cls(
            resources,
            on_load_missing_data,
            past_months_to_render=merged["past_months_to_render"],
            future_months_to_render=merged["future_months_to_render"],
            day_cell_width=merged["day_cell_width"],
            day_cell_height=merged["day_cell_height"],
            event_row_height=merged["event_row_height"],
            resource_row_height=merged["resource_row_height"],
            column_gap=merged["column_gap"],
            overscan=merged["overscan"],
            allow_selection=merged["allow_selection"],
            allow_select_in_past=merged["allow_select_in_past"],
            fetch_debounce=merged["fetch_debounce_ms"] / 1000,
            resize_settle=merged["resize_settle_ms"] / 1000,
            **kwargs,
        )

    @property
    def date_index(self) -> DateIndex:
        return self._date_index

    @property
    def cache(self) -> DataCache:
        return self._cache

    @property
    def resources(self) -> list[CalendarResource]:
        return self._cache.resources

    @property
    def visible_row_indexes(self) -> tuple[int, ...]:
        return tuple(self._viewport.visible_rows)

    @property
    def visible_column_indexes(self) -> tuple[int, ...]:
        return tuple(self._viewport.visible_cols)

    @property
    def viewport(self) -> Viewport:
        return self._viewport.viewport

    @property
    def scroll_top(self) -> float:
        return self._viewport.scroll_top

    @property
    def scroll_left(self) -> float:
        return self._viewport.scroll_left

    @property
    def month_groups(self) -> tuple[MonthGroup, ...]:
        return self._date_index.month_groups

    @property
    def is_ready(self) -> bool:
        return self._viewport.is_ready

    @property
    def is_hidden(self) -> bool:
        return self._viewport.is_hidden

    @property
    def hovered_date_index(self) -> Optional[int]:
        return self._hovered_date_index

    @property
    def selection(self) -> Optional[Selection]:
        return self._selection.selection

    @property
    def in_flight_generations(self) -> list[int]:
        return sorted(self._fetch_tasks)

    def mount(self, container_size: Optional[ContainerSize]) -> None:
        """First measurement: scrolls to today and requests the initial window."""
        self._measure(container_size)

    def on_scroll(self, scroll_top: float, scroll_left: float) -> None:
        self._viewport.update_scroll(scroll_top, scroll_left)
        self.attempt_load_data()

    def on_resize(self, container_size: Optional[ContainerSize]) -> None:
        self._viewport.begin_resize()
        self._resize_debouncer.call(lambda: self._measure(container_size))

    def set_resources(self, resources: Sequence[CalendarResource]) -> None:
        """Swap the resource list. Caches are reset, never diffed."""
        self._cancel_fetches()
        self._selection.clear()
        self._cache.set_resources(resources)
        self._viewport.set_resource_count(len(resources))
        self._viewport.update_scroll(0, self._viewport.scroll_left)
        self.attempt_load_data()

    def scroll_to_date(self, target: time.DateLike, lead_days: int = 2) -> None:
        offset = self._viewport.scroll_offset_for_date(
            self._date_index, target, lead_days
        )
        self.on_scroll(self._viewport.scroll_top, offset)

    def calendar_updated(
        self,
        resource_key: ResourceKey,
        start_date: time.DateLike,
        end_date: time.DateLike,
    ) -> None:
        """Invalidate cells changed out of band and load them again."""
        self._cache.clear_days_data(resource_key, start_date, end_date)
        self.attempt_load_data()

    def set_hovered_date_index(self, index: Optional[int]) -> None:
        self._hovered_date_index = index

    def is_date_hovered(self, index: int) -> bool:
        return self._hovered_date_index == index

    def drag_start(self, resource_key: ResourceKey, date_index: int) -> bool:
        return self._selection.drag_start(resource_key, date_index)

    def drag_over(self, date_index: int) -> None:
        self._selection.drag_over(date_index)

    def mouse_up(self) -> Optional[SelectionCommit]:
        return self._selection.mouse_up()

    def clear_selection(self) -> None:
        self._selection.clear()

    def is_selected(self, resource_key: ResourceKey, date_index: int) -> bool:
        return self._selection.is_selected(resource_key, date_index)

    def events_for_resource(self, key: ResourceKey) -> EventLayout:
        return layout_visible_events(
            self._cache.get_events(key),
            self._date_index,
            self.visible_column_indexes,
            self.tz,
        )

    def row_pixel_height(self, key: ResourceKey) -> float:
        layout = self.events_for_resource(key)
        return row_pixel_height(
            layout["max_concurrency"], self.day_cell_height, self.event_row_height
        )

    def get_missing_data_to_load(self) -> Optional[MissingData]:
        columns = self._viewport.visible_cols
        if not columns:
            return None
        return self._cache.get_missing_data_to_load(
            self._viewport.visible_rows, columns[0], columns[-1]
        )

    def attempt_load_data(self) -> None:
        self._fetch_debouncer.call(self._dispatch_missing_data)

    async def settle(self) -> None:
        """Wait until no debounced call or fetch is outstanding."""
        while (
            self._fetch_debouncer.pending
            or self._resize_debouncer.pending
            or self._fetch_tasks
        ):
            if self._fetch_tasks:
                await asyncio.gather(
                    *self._fetch_tasks.values(), return_exceptions=True
                )
                # Done callbacks prune the task map on the next loop pass.
                await asyncio.sleep(0)
            else:
                await asyncio.sleep(
                    max(self._fetch_debouncer.delay, self._resize_debouncer.delay)
                )

    def close(self) -> None:
        self._fetch_debouncer.cancel()
        self._resize_debouncer.cancel()
        self._cancel_fetches()

    def render(self, renderer: GridRenderer) -> GridFrame:
        """Call the render callbacks for the visible window only."""
        columns = self.visible_column_indexes
        frame: GridFrame = {
            "is_hidden": self.is_hidden,
            "column_indexes": columns,
            "month_headers": self._render_month_headers(renderer, columns),
            "rows": [],
        }

        for row in self.visible_row_indexes:
            resource = self._cache.resource_at(row)
            key = resource_key(resource)
            layout = self.events_for_resource(key)

            day_elements = []
            for column in columns:
                day_elements.append(
                    renderer.render_day_element(
                        resource,
                        self._date_index.date_at(column),
                        self._cache.get_day(key, column),
                        self._cache.get_day(key, column - 1),
                        self.is_selected(key, column),
                        self._drag_handlers(key, column),
                    )
                )

            event_elements = [
                renderer.render_event_element(
                    resource,
                    event,
                    event_position_style(
                        event,
                        self._date_index,
                        self.day_cell_width,
                        self.event_row_height,
                        gap=self.column_gap,
                        tz=self.tz,
                    ),
                )
                for event in layout["events"]
            ]

            row_frame: RowFrame = {
                "resource": resource,
                "row_index": row,
                "row_pixel_height": row_pixel_height(
                    layout["max_concurrency"],
                    self.day_cell_height,
                    self.event_row_height,
                ),
                "max_concurrency": layout["max_concurrency"],
                "resource_element": renderer.render_resource_element(resource),
                "day_elements": day_elements,
                "event_elements": event_elements,
            }
            frame["rows"].append(row_frame)

        return frame

    def _render_month_headers(
        self, renderer: GridRenderer, columns: Sequence[int]
    ) -> list[MonthHeaderFrame]:
        headers: list[MonthHeaderFrame] = []
        for column in columns:
            date = self._date_index.date_at(column)
            first_day_of_month = date["date"].start_of("month")
            if not headers or headers[-1]["first_day_of_month"] != first_day_of_month:
                headers.append(
                    {"first_day_of_month": first_day_of_month, "day_headers": []}
                )
            headers[-1]["day_headers"].append(
                renderer.render_day_header_element(
                    date, self.day_cell_width, self.is_date_hovered(column)
                )
            )
        return headers

    def _drag_handlers(self, key: ResourceKey, column: int) -> DragHandlers:
        return {
            "on_drag_start": lambda: self.drag_start(key, column),
            "on_drag_over": lambda: self.drag_over(column),
            "on_mouse_over": lambda: self.set_hovered_date_index(column),
            "on_mouse_leave": lambda: self.set_hovered_date_index(None),
        }

    def _measure(self, container_size: Optional[ContainerSize]) -> None:
        initial_scroll = self._viewport.measure(container_size, self._date_index)
        if initial_scroll is not None:
            logger.debug("Initial scroll to today at %spx", initial_scroll)
        if self._viewport.is_ready:
            self.attempt_load_data()

    def _dispatch_missing_data(self) -> None:
        missing = self.get_missing_data_to_load()
        if missing is None:
            return

        generation = self._cache.next_generation()
        logger.debug(
            "Loading %s..%s for %d resource(s), generation %d",
            missing["start"],
            missing["end"],
            len(missing["resources"]),
            generation,
        )
        task = asyncio.ensure_future(self._load_missing_data(missing, generation))
        self._fetch_tasks[generation] = task
        task.add_done_callback(lambda _: self._fetch_tasks.pop(generation, None))

    async def _load_missing_data(self, missing: MissingData, generation: int) -> None:
        try:
            batches = await self._on_load_missing_data(
                list(missing["resources"]), missing["start"], missing["end"]
            )
            # A malformed response fails the whole merge and leaves the cache as is
            self._cache.add_days_and_event_data(batches, generation=generation)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            error = MissingDataFetchError(missing, generation)
            error.__cause__ = e
            self._report_error(error)

    def _report_error(self, error: MissingDataFetchError) -> None:
        if self._on_error is None:
            logger.error("%s", error, exc_info=error)
            return
        logger.warning("%s", error)
        self._on_error(error)

    def _cancel_fetches(self) -> None:
        for task in self._fetch_tasks.values():
            task.cancel()
        self._fetch_tasks = {}
