# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from multicalendar import configuration
from multicalendar.repository.configuration import CONFIGURATION_REPO
from multicalendar.terminal.custom_typer import AliasedTyperGroup

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


@app.command("view, v")
def view() -> None:
    """Display current configuration settings."""
    config = CONFIGURATION_REPO.get_config()

    console = Console()
    table = Table()
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")

    for key, value in config.items():
        if isinstance(value, bool):
            table.add_row(key, "✓ Enabled" if value else "✗ Disabled")
        else:
            table.add_row(key, str(value))

    console.print(table)
    console.print()
    console.print(f"Config file: {configuration.APP_CONFIG_PATH}")


@app.command("set, s")
def set(
    past_months_to_render: Annotated[
        Optional[int],
        typer.Option("--past-months", help="Months before today in the date range"),
    ] = None,
    future_months_to_render: Annotated[
        Optional[int],
        typer.Option("--future-months", help="Months after today in the date range"),
    ] = None,
    day_cell_width: Annotated[
        Optional[int], typer.Option("--day-cell-width", help="Day cell width in px")
    ] = None,
    day_cell_height: Annotated[
        Optional[int], typer.Option("--day-cell-height", help="Day cell height in px")
    ] = None,
    event_row_height: Annotated[
        Optional[int],
        typer.Option("--event-row-height", help="Height of one event lane in px"),
    ] = None,
    resource_row_height: Annotated[
        Optional[int],
        typer.Option("--resource-row-height", help="Resource label row height in px"),
    ] = None,
    column_gap: Annotated[
        Optional[int], typer.Option("--column-gap", help="Gap between day cells in px")
    ] = None,
    overscan: Annotated[
        Optional[int],
        typer.Option("--overscan", help="Rows/columns rendered beyond the viewport"),
    ] = None,
    fetch_debounce_ms: Annotated[
        Optional[int],
        typer.Option("--fetch-debounce-ms", help="Delay before loading missing data"),
    ] = None,
    resize_settle_ms: Annotated[
        Optional[int],
        typer.Option("--resize-settle-ms", help="Delay before re-measuring on resize"),
    ] = None,
    allow_selection: Annotated[
        Optional[bool],
        typer.Option(
            "--allow-selection/--no-allow-selection",
            help="Enable/disable drag selection of date ranges",
        ),
    ] = None,
    allow_select_in_past: Annotated[
        Optional[bool],
        typer.Option(
            "--allow-select-in-past/--no-allow-select-in-past",
            help="Enable/disable selecting past dates",
        ),
    ] = None,
    show_header: Annotated[
        Optional[bool],
        typer.Option("--show-header/--no-show-header", help="Show the view header"),
    ] = None,
) -> None:
    """Update configuration settings."""
    try:
        CONFIGURATION_REPO.update_config(
            past_months_to_render=past_months_to_render,
            future_months_to_render=future_months_to_render,
            day_cell_width=day_cell_width,
            day_cell_height=day_cell_height,
            event_row_height=event_row_height,
            resource_row_height=resource_row_height,
            column_gap=column_gap,
            overscan=overscan,
            fetch_debounce_ms=fetch_debounce_ms,
            resize_settle_ms=resize_settle_ms,
            allow_selection=allow_selection,
            allow_select_in_past=allow_select_in_past,
            show_header=show_header,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))

    view()
