# SPDX-License-Identifier: MIT

import logging
from typing import Callable, Optional

import pendulum

from multicalendar.model.resource import CalendarResource, ResourceKey
from multicalendar.model.selection import Selection, SelectionCommit, SelectionState
from multicalendar.service.date_index import DateIndex

logger = logging.getLogger(__name__)

DateRangeSelectedCallback = Callable[[CalendarResource, pendulum.Date, pendulum.Date], None]
ResourceLookup = Callable[[ResourceKey], Optional[CalendarResource]]


class SelectionController:
    """
    Drag selection of a date range on one resource row.

    idle -> dragging on drag start, back to idle on mouse up (commit) or
    clear. Only one selection exists across the whole grid; starting a drag
    on another row replaces it.
    """

    def __init__(
        self,
        date_index: DateIndex,
        resource_lookup: ResourceLookup,
        on_date_range_selected: Optional[DateRangeSelectedCallback] = None,
        allow_selection: bool = True,
        allow_select_in_past: bool = False,
    ) -> None:
        self._date_index = date_index
        self._resource_lookup = resource_lookup
        self._on_date_range_selected = on_date_range_selected
        self.allow_selection = allow_selection
        self.allow_select_in_past = allow_select_in_past
        self._selection: Optional[Selection] = None

    @property
    def state(self) -> SelectionState:
        return "idle" if self._selection is None else "dragging"

    @property
    def selection(self) -> Optional[Selection]:
        if self._selection is None:
            return None
        return {
            "resource_key": self._selection["resource_key"],
            "start_index": self._selection["start_index"],
            "end_index": self._selection["end_index"],
        }

    def is_selectable(self, date_index: int) -> bool:
        if not self.allow_selection:
            return False
        if date_index < 0 or date_index >= len(self._date_index):
            return False
        return self.allow_select_in_past or not self._date_index.date_at(date_index)["is_past"]

    def is_selected(self, resource_key: ResourceKey, date_index: int) -> bool:
        selection = self._selection
        return (
            selection is not None
            and selection["resource_key"] == resource_key
            and selection["start_index"] <= date_index <= selection["end_index"]
        )

    def drag_start(self, resource_key: ResourceKey, date_index: int) -> bool:
        if not self.is_selectable(date_index):
            return False
        self._selection = {
            "resource_key": resource_key,
            "start_index": date_index,
            "end_index": date_index,
        }
        return True

    def drag_over(self, date_index: int) -> None:
        selection = self._selection
        if selection is None or not self.is_selectable(date_index):
            return

        start_index = selection["start_index"]
        end_index = selection["end_index"]
        if end_index < date_index or start_index < date_index:
            end_index = date_index
        else:
            start_index = date_index

        self._selection = {
            "resource_key": selection["resource_key"],
            "start_index": start_index,
            "end_index": end_index,
        }

    def mouse_up(self) -> Optional[SelectionCommit]:
        """Commit the active selection, if any, and return to idle."""
        selection = self._selection
        if selection is None:
            return None
        self._selection = None

        resource = self._resource_lookup(selection["resource_key"])
        if resource is None:
            logger.debug(
                "Dropping selection for resource %r that is no longer in the grid",
                selection["resource_key"],
            )
            return None

        commit: SelectionCommit = {
            "resource": resource,
            "start": self._date_index.date_at(selection["start_index"])["date"],
            "end": self._date_index.date_at(selection["end_index"])["date"],
        }
        if self._on_date_range_selected is not None:
            self._on_date_range_selected(commit["resource"], commit["start"], commit["end"])
        return commit

    def clear(self) -> None:
        self._selection = None
