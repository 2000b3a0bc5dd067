# SPDX-License-Identifier: MIT

from typing import Iterable, Sequence

import pendulum

from multicalendar import time
from multicalendar.model.event import (
    CalendarEvent,
    EventInfo,
    EventLayout,
    EventPositionStyle,
)
from multicalendar.service.date_index import DateIndex


def intervals_overlap(
    a_start: pendulum.DateTime,
    a_end: pendulum.DateTime,
    b_start: pendulum.DateTime,
    b_end: pendulum.DateTime,
) -> bool:
    """Half-open [start, end) intersection test."""
    return a_start < b_end and b_start < a_end


def layout_events(
    events: Iterable[EventInfo],
    visible_start: pendulum.DateTime,
    visible_end: pendulum.DateTime,
) -> EventLayout:
    """
    Assign a vertical lane to every event intersecting the visible interval.

    Events are processed in the given (chronological) order. Each event looks
    at the already placed visible events it overlaps:

    - no overlap: lane 1
    - exactly one overlap: lane 2 when the neighbor sits in lane 1, otherwise
      the lane just above the neighbor
    - several overlaps: the first free slot inside a gap between the
      neighbors' sorted lanes, otherwise one past the highest neighbor lane

    This is a local heuristic, not a minimum coloring, and is kept as is so
    rendered layouts stay stable.

    Args:
        events: Events of one resource, sorted by start
        visible_start: Start of the visible interval (inclusive)
        visible_end: End of the visible interval (exclusive)

    Returns:
        New event records with lane and overlap_ids set, ordered by lane, and
        the highest lane used
    """
    placed: list[CalendarEvent] = []
    max_concurrency = 0

    for event in events:
        if not intervals_overlap(
            event["start"], event["end"], visible_start, visible_end
        ):
            continue

        overlapping = [
            other
            for other in placed
            if intervals_overlap(other["start"], other["end"], event["start"], event["end"])
        ]
        lane = _choose_lane([other["lane"] for other in overlapping])

        placed.append(
            {
                "id": event["id"],
                "start": event["start"],
                "end": event["end"],
                "data": dict(event["data"]),
                "lane": lane,
                "overlap_ids": [other["id"] for other in overlapping],
            }
        )
        max_concurrency = max(max_concurrency, lane)

    return {
        "events": sorted(placed, key=lambda placed_event: placed_event["lane"]),
        "max_concurrency": max_concurrency,
    }


def _choose_lane(neighbor_lanes: Sequence[int]) -> int:
    if not neighbor_lanes:
        return 1
    if len(neighbor_lanes) == 1:
        neighbor_lane = neighbor_lanes[0]
        return 2 if neighbor_lane == 1 else neighbor_lane - 1

    lanes = sorted(neighbor_lanes)
    for lower, upper in zip(lanes, lanes[1:]):
        if upper - lower > 1:
            return lower + 1
    return lanes[-1] + 1


def visible_interval(
    date_index: DateIndex, column_indexes: Sequence[int], tz: str = "local"
) -> tuple[pendulum.DateTime, pendulum.DateTime]:
    """The half-open span covering every visible day column."""
    first_day = date_index.date_at(column_indexes[0])["date"]
    last_day = date_index.date_at(column_indexes[-1])["date"]
    return time.day_start(first_day, tz), time.day_start(last_day.add(days=1), tz)


def layout_visible_events(
    events: Iterable[EventInfo],
    date_index: DateIndex,
    column_indexes: Sequence[int],
    tz: str = "local",
) -> EventLayout:
    if not len(date_index) or not column_indexes:
        return {"events": [], "max_concurrency": 0}
    visible_start, visible_end = visible_interval(date_index, column_indexes, tz)
    return layout_events(events, visible_start, visible_end)


def event_position_style(
    event: CalendarEvent,
    date_index: DateIndex,
    cell_width: float,
    event_row_height: float,
    gap: float = 4,
    tz: str = "local",
) -> EventPositionStyle:
    """
    Absolute placement of an event bar inside its resource row.

    The bar starts a third of a cell into its first day and spans whole
    days; the lane picks the vertical slot.
    """
    column_width = cell_width + gap
    range_start = date_index.start
    days_from_start = 0
    if range_start is not None:
        days_from_start = time.days_between(
            range_start, time.local_date(event["start"], tz)
        )
    return {
        "left": column_width * days_from_start + cell_width / 3,
        "top": (event["lane"] - 1) * event_row_height,
        "width": column_width
        * time.whole_days_between(event["start"], event["end"], tz),
        "height": event_row_height,
    }


def row_pixel_height(
    max_concurrency: int, cell_height: float, event_row_height: float
) -> float:
    return max(cell_height, event_row_height * max_concurrency)
