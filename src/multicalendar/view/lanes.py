# SPDX-License-Identifier: MIT

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from multicalendar.model.event import EventLayout
from multicalendar.model.resource import CalendarResource
from multicalendar.view.header import header


def lanes_view(
    resource: CalendarResource,
    layout: EventLayout,
    sub_header: Optional[str] = None,
    console: Optional[Console] = None,
) -> None:
    """Print the lane assignment of one resource's visible events."""
    if console is None:
        console = Console()

    name = resource.get("name", resource["id"])
    header(f"Event lanes: {name}", sub_header)

    if not layout["events"]:
        console.print("\n[dim]No events in range[/dim]\n")
        return

    table = Table(box=box.SIMPLE, show_header=True, padding=(0, 1))
    table.add_column("Lane", justify="right", style="bold")
    table.add_column("Id")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Overlaps")
    for event in layout["events"]:
        table.add_row(
            str(event["lane"]),
            str(event["id"]),
            event["start"].format("YYYY-MM-DD HH:mm"),
            event["end"].format("YYYY-MM-DD HH:mm"),
            ", ".join(str(overlap_id) for overlap_id in event["overlap_ids"]),
        )

    console.print()
    console.print(table)
    console.print(f"[bold]Max concurrency:[/bold] {layout['max_concurrency']}\n")
