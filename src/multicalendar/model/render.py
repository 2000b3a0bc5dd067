# SPDX-License-Identifier: MIT

from typing import Any, Callable, Optional, Protocol, TypedDict

import pendulum

from multicalendar.model.calendar_date import CalendarDate
from multicalendar.model.day_cell import DayCell
from multicalendar.model.event import CalendarEvent, EventPositionStyle
from multicalendar.model.resource import CalendarResource


class DragHandlers(TypedDict):
    on_drag_start: Callable[[], bool]
    on_drag_over: Callable[[], None]
    on_mouse_over: Callable[[], None]
    on_mouse_leave: Callable[[], None]


class GridRenderer(Protocol):
    def render_resource_element(self, resource: CalendarResource) -> Any: ...

    def render_day_element(
        self,
        resource: CalendarResource,
        date: CalendarDate,
        day_info: Optional[DayCell],
        prev_day_info: Optional[DayCell],
        is_selected: bool,
        drag_handlers: DragHandlers,
    ) -> Any: ...

    def render_event_element(
        self,
        resource: CalendarResource,
        event: CalendarEvent,
        position_style: EventPositionStyle,
    ) -> Any: ...

    def render_day_header_element(
        self, date: CalendarDate, cell_width: float, is_hovered: bool
    ) -> Any: ...


class MonthHeaderFrame(TypedDict):
    first_day_of_month: pendulum.Date
    day_headers: list[Any]


class RowFrame(TypedDict):
    resource: CalendarResource
    row_index: int
    row_pixel_height: float
    max_concurrency: int
    resource_element: Any
    day_elements: list[Any]
    event_elements: list[Any]


class GridFrame(TypedDict):
    is_hidden: bool
    column_indexes: tuple[int, ...]
    month_headers: list[MonthHeaderFrame]
    rows: list[RowFrame]
