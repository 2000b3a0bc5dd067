# SPDX-License-Identifier: MIT

from typing import Literal, TypedDict

import pendulum

from multicalendar.model.resource import CalendarResource, ResourceKey

SelectionState = Literal["idle", "dragging"]


class Selection(TypedDict):
    resource_key: ResourceKey
    start_index: int
    end_index: int


class SelectionCommit(TypedDict):
    resource: CalendarResource
    start: pendulum.Date
    end: pendulum.Date
