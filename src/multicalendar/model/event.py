# SPDX-License-Identifier: MIT

from typing import Any, Hashable, TypedDict

import pendulum


class EventInfo(TypedDict):
    id: Hashable
    start: pendulum.DateTime
    end: pendulum.DateTime
    data: dict[str, Any]


class CalendarEvent(TypedDict):
    id: Hashable
    start: pendulum.DateTime
    end: pendulum.DateTime
    data: dict[str, Any]
    lane: int
    overlap_ids: list[Hashable]


class EventLayout(TypedDict):
    events: list[CalendarEvent]
    max_concurrency: int


class EventPositionStyle(TypedDict):
    left: float
    top: float
    width: float
    height: float
