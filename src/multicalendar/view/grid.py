# SPDX-License-Identifier: MIT

from typing import Any, Optional, TypedDict

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from multicalendar.grid import MultiCalendarGrid
from multicalendar.model.calendar_date import CalendarDate
from multicalendar.model.day_cell import DayCell
from multicalendar.model.event import CalendarEvent, EventPositionStyle
from multicalendar.model.render import DragHandlers, GridFrame
from multicalendar.model.resource import CalendarResource
from multicalendar.view.header import header

TODAY_STYLE = "bold black on bright_cyan"
WEEKEND_STYLE = "on grey23"
SELECTED_STYLE = "reverse"
HOVERED_STYLE = "bold underline"
LOADING_SYMBOL = "…"
EMPTY_SYMBOL = "·"
EVENT_COLORS = ["cyan", "magenta", "green", "yellow", "blue", "red"]


class EventBar(TypedDict):
    lane: int
    first_column: int
    span: int
    text: Text


class RichGridRenderer:
    """
    Render callbacks that turn grid cells into rich Text.

    Day cells show their ``label`` field (falling back to ``price`` and
    ``status``); events become bars addressed by column so the table view
    can lay them out per lane.
    """

    def __init__(self, cell_width: float, gap: float = 4) -> None:
        self.cell_width = cell_width
        self.gap = gap

    def render_resource_element(self, resource: CalendarResource) -> Text:
        name = resource.get("name")
        return Text(str(name if name is not None else resource["id"]), style="bold")

    def render_day_element(
        self,
        resource: CalendarResource,
        date: CalendarDate,
        day_info: Optional[DayCell],
        prev_day_info: Optional[DayCell],
        is_selected: bool,
        drag_handlers: DragHandlers,
    ) -> Text:
        if day_info is None:
            return Text(LOADING_SYMBOL, style="dim")

        label = _day_label(day_info)
        style = ""
        if date["is_past"]:
            style = "dim"
        if date["is_weekend"]:
            style = f"{style} {WEEKEND_STYLE}".strip()
        if is_selected:
            style = f"{style} {SELECTED_STYLE}".strip()

        cell = Text()
        if (
            prev_day_info is not None
            and prev_day_info.get("status") != day_info.get("status")
        ):
            # Status changes from the previous day
            cell.append("|", style="bright_black")
        cell.append(label, style=style)
        return cell

    def render_event_element(
        self,
        resource: CalendarResource,
        event: CalendarEvent,
        position_style: EventPositionStyle,
    ) -> EventBar:
        column_width = self.cell_width + self.gap
        first_column = round((position_style["left"] - self.cell_width / 3) / column_width)
        span = max(round(position_style["width"] / column_width), 1)
        title = event["data"].get("title")
        color = event["data"].get("color") or EVENT_COLORS[
            (event["lane"] - 1) % len(EVENT_COLORS)
        ]
        return {
            "lane": event["lane"],
            "first_column": first_column,
            "span": span,
            "text": Text(str(title if title is not None else event["id"]), style=color),
        }

    def render_day_header_element(
        self, date: CalendarDate, cell_width: float, is_hovered: bool
    ) -> Text:
        day = date["date"]
        text = Text(f"{day.format('ddd')}\n{day.day:2d}")
        if date["is_today"]:
            text.stylize(TODAY_STYLE)
        elif date["is_weekend"]:
            text.stylize(WEEKEND_STYLE)
        if is_hovered:
            text.stylize(HOVERED_STYLE)
        return text


def grid_view(
    grid: MultiCalendarGrid,
    renderer: Optional[RichGridRenderer] = None,
    console: Optional[Console] = None,
    column_width: int = 6,
) -> GridFrame:
    """
    Print the visible window of a grid as a table.

    Each resource gets a day row followed by one row per event lane.

    Args:
        grid: The grid to print
        renderer: Render callbacks (defaults to RichGridRenderer)
        console: Console to print to (defaults to a new Console)
        column_width: Width of each day column in characters

    Returns:
        The frame that was printed
    """
    if renderer is None:
        renderer = RichGridRenderer(grid.day_cell_width, grid.column_gap)
    if console is None:
        console = Console()

    frame = grid.render(renderer)
    columns = frame["column_indexes"]

    sub_header = None
    if columns:
        first = grid.date_index.date_at(columns[0])["formatted_date"]
        last = grid.date_index.date_at(columns[-1])["formatted_date"]
        sub_header = f"{first} .. {last}"
    header("Multi-resource calendar", sub_header)

    if frame["is_hidden"] or not columns:
        console.print("\n[dim]Grid is not ready[/dim]\n")
        return frame

    months = " | ".join(
        month["first_day_of_month"].format("MMM YYYY") for month in frame["month_headers"]
    )
    table = Table(box=box.SIMPLE, show_header=True, padding=(0, 1), title=months)
    table.add_column("Resource", no_wrap=True)
    for month in frame["month_headers"]:
        for day_header in month["day_headers"]:
            table.add_column(day_header, width=column_width, no_wrap=True)

    for row in frame["rows"]:
        table.add_row(row["resource_element"], *row["day_elements"])
        for lane_cells in _lane_rows(row["event_elements"], columns, row["max_concurrency"]):
            table.add_row("", *lane_cells)

    console.print()
    console.print(table)
    console.print()
    return frame


def _lane_rows(
    bars: list[EventBar], columns: tuple[int, ...], max_concurrency: int
) -> list[list[Any]]:
    position_by_column = {column: position for position, column in enumerate(columns)}
    rows: list[list[Any]] = [
        ["" for _ in columns] for _ in range(max_concurrency)
    ]
    for bar in bars:
        lane_cells = rows[bar["lane"] - 1]
        shown_title = False
        for column in range(bar["first_column"], bar["first_column"] + bar["span"]):
            position = position_by_column.get(column)
            if position is None:
                continue
            if not shown_title:
                lane_cells[position] = bar["text"]
                shown_title = True
            else:
                lane_cells[position] = Text("━", style=bar["text"].style)
    return rows


def _day_label(day_info: DayCell) -> str:
    for field in ("label", "price", "status"):
        value = day_info.get(field)
        if value is not None:
            return str(value)
    return EMPTY_SYMBOL
