# SPDX-License-Identifier: MIT

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console

from multicalendar import time
from multicalendar.grid import MissingDataFetchError, MultiCalendarGrid
from multicalendar.model.resource import CalendarResource, resource_key
from multicalendar.repository.configuration import CONFIGURATION_REPO
from multicalendar.repository.data_cache import DataCache
from multicalendar.repository.yaml_source import YamlDataSource
from multicalendar.service.date_index import DateIndex, build_range
from multicalendar.service.event_layout import layout_visible_events
from multicalendar.terminal.parse import parse_date, parse_resource_id
from multicalendar.view.grid import grid_view
from multicalendar.view.lanes import lanes_view

DATE_HELP = "valid inputs: YYYY-MM-DD, today, yesterday, tomorrow, or day offset like 1, -1"

DataFile = Annotated[
    Path,
    typer.Argument(
        exists=True, dir_okay=False, readable=True, help="YAML file with grid data"
    ),
]


def show(
    data_file: DataFile,
    date: Annotated[
        Optional[pendulum.Date],
        typer.Option("--date", "-d", parser=parse_date, help=f"scroll to date, {DATE_HELP}"),
    ] = None,
    start: Annotated[
        Optional[pendulum.Date],
        typer.Option("--start", "-s", parser=parse_date, help=f"range start, {DATE_HELP}"),
    ] = None,
    end: Annotated[
        Optional[pendulum.Date],
        typer.Option("--end", "-e", parser=parse_date, help=f"range end, {DATE_HELP}"),
    ] = None,
    width: Annotated[
        float, typer.Option("--width", "-w", help="container width in px")
    ] = 1000,
    height: Annotated[
        float, typer.Option("--height", "-h", help="container height in px")
    ] = 600,
    scroll_top: Annotated[
        float, typer.Option("--scroll-top", help="vertical scroll offset in px")
    ] = 0,
    scroll_left: Annotated[
        Optional[float],
        typer.Option("--scroll-left", help="horizontal scroll offset in px, overrides --date"),
    ] = None,
    column_width: Annotated[
        int, typer.Option("--column-width", help="characters per day column")
    ] = 6,
) -> None:
    """Print the visible window of the grid, loading what it shows."""
    source = YamlDataSource(data_file)
    resources = _load_resources(source)
    date_index = _date_index_for_options(start, end)
    if (
        date is None
        and date_index is not None
        and date_index.end is not None
        and date_index.end < date_index.today
    ):
        # Today lies after the range, show its beginning instead
        date = date_index.start
    errors: list[MissingDataFetchError] = []

    async def load() -> MultiCalendarGrid:
        grid = MultiCalendarGrid.from_configuration(
            CONFIGURATION_REPO.get_config(),
            resources,
            source.load_missing_data,
            on_error=errors.append,
            date_index=date_index,
        )
        grid.mount({"width": width, "height": height})
        if date is not None:
            grid.scroll_to_date(date)
        if scroll_top or scroll_left is not None:
            grid.on_scroll(
                scroll_top, scroll_left if scroll_left is not None else grid.scroll_left
            )
        await grid.settle()
        grid.close()
        return grid

    grid = asyncio.run(load())

    if errors:
        console = Console()
        for error in errors:
            cause = f": {error.__cause__}" if error.__cause__ is not None else ""
            console.print(f"[red]{error}{cause}[/red]")
        raise typer.Exit(code=1)

    grid_view(grid, column_width=column_width)


def lanes(
    data_file: DataFile,
    resource_id: Annotated[str, typer.Argument(help="id of the resource")],
    start: Annotated[
        Optional[pendulum.Date],
        typer.Option("--start", "-s", parser=parse_date, help=f"range start, {DATE_HELP}"),
    ] = None,
    end: Annotated[
        Optional[pendulum.Date],
        typer.Option("--end", "-e", parser=parse_date, help=f"range end, {DATE_HELP}"),
    ] = None,
) -> None:
    """Print the lane assigned to each event of one resource."""
    source = YamlDataSource(data_file)
    resources = _load_resources(source)
    resource = _find_resource(resources, resource_id)
    date_index = _date_index_for_options(start, end, default_days=30)
    assert date_index is not None
    assert date_index.start is not None and date_index.end is not None

    cache = DataCache(date_index, resources)
    batches = asyncio.run(
        source.load_missing_data(
            [resource],
            time.date_to_ymd_str(date_index.start),
            time.date_to_ymd_str(date_index.end),
        )
    )
    cache.add_days_and_event_data(batches)

    layout = layout_visible_events(
        cache.get_events(resource_key(resource)),
        date_index,
        range(len(date_index)),
    )
    lanes_view(
        resource,
        layout,
        sub_header=f"{time.date_to_ymd_str(date_index.start)} .. {time.date_to_ymd_str(date_index.end)}",
    )


def select(
    data_file: DataFile,
    resource_id: Annotated[str, typer.Argument(help="id of the resource")],
    start: Annotated[
        pendulum.Date,
        typer.Argument(parser=parse_date, help=f"first selected day, {DATE_HELP}"),
    ],
    end: Annotated[
        pendulum.Date,
        typer.Argument(parser=parse_date, help=f"last selected day, {DATE_HELP}"),
    ],
    allow_past: Annotated[
        Optional[bool],
        typer.Option(
            "--allow-past/--no-allow-past",
            help="override the allow_select_in_past setting",
        ),
    ] = None,
) -> None:
    """Drag-select a date range on one resource and print the committed range."""
    source = YamlDataSource(data_file)
    resources = _load_resources(source)
    resource = _find_resource(resources, resource_id)
    key = resource_key(resource)
    date_index = build_range(min(start, end), max(start, end))

    config = CONFIGURATION_REPO.get_config()
    if allow_past is not None:
        config["allow_select_in_past"] = allow_past

    console = Console()
    grid = MultiCalendarGrid.from_configuration(
        config, resources, source.load_missing_data, date_index=date_index
    )
    start_index = date_index.index_of(start)
    end_index = date_index.index_of(end)
    assert start_index is not None and end_index is not None

    if not grid.drag_start(key, start_index):
        console.print(
            f"[red]{time.date_to_ymd_str(start)} cannot be selected[/red]"
        )
        raise typer.Exit(code=1)
    grid.drag_over(end_index)
    commit = grid.mouse_up()
    grid.close()

    if commit is None:
        console.print("[red]Nothing selected[/red]")
        raise typer.Exit(code=1)

    name = commit["resource"].get("name", resource_key(commit["resource"]))
    console.print(
        f"Selected [bold]{name}[/bold]: "
        f"{time.date_to_ymd_str(commit['start'])} .. {time.date_to_ymd_str(commit['end'])}"
    )


def _load_resources(source: YamlDataSource) -> list[CalendarResource]:
    try:
        return source.resources
    except (ValueError, KeyError) as e:
        raise typer.BadParameter(f"Could not read {source.path}: {e}")


def _find_resource(resources: list[CalendarResource], resource_id: str) -> CalendarResource:
    key = parse_resource_id(resource_id)
    for resource in resources:
        if resource_key(resource) == key:
            return resource
    raise typer.BadParameter(f"No resource with id {resource_id}")


def _date_index_for_options(
    start: Optional[pendulum.Date],
    end: Optional[pendulum.Date],
    default_days: Optional[int] = None,
) -> Optional[DateIndex]:
    if start is None and end is None:
        if default_days is None:
            return None
        start = time.today_local()
    if start is None:
        assert end is not None
        start = end.subtract(days=default_days or 30)
    if end is None:
        end = start.add(days=default_days or 30)
    try:
        return build_range(start, end)
    except ValueError as e:
        raise typer.BadParameter(str(e))
