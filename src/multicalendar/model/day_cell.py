# SPDX-License-Identifier: MIT

from typing import Any, NotRequired, TypedDict

from multicalendar.model.resource import ResourceKey

# A DayCell carries at least a "date" ("YYYY-MM-DD"); every other field is
# host payload that the engine passes through untouched.
DayCell = dict[str, Any]


class DayBatch(TypedDict):
    resource_key: ResourceKey
    day_data: list[DayCell]
    event_data: NotRequired[list[dict[str, Any]]]
