# SPDX-License-Identifier: MIT

from typing import Any, Hashable, Mapping

# Resources are host-owned handles. The engine reads nothing but the
# identity key stored under "id".
CalendarResource = Mapping[str, Any]
ResourceKey = Hashable

RESOURCE_KEY_FIELD = "id"


def resource_key(resource: CalendarResource) -> ResourceKey:
    return resource[RESOURCE_KEY_FIELD]
