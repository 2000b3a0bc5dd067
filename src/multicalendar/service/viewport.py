# SPDX-License-Identifier: MIT

import math
from typing import Optional

from multicalendar import time
from multicalendar.model.viewport import ContainerSize, Viewport, VisibleRange
from multicalendar.service.date_index import DateIndex

DEFAULT_COLUMN_GAP = 4
DEFAULT_OVERSCAN = 3


def compute_visible(
    scroll_top: float,
    scroll_left: float,
    container_size: Optional[ContainerSize],
    cell_height: float,
    cell_width: float,
    resource_row_height: float,
    resource_count: int,
    date_count: int,
    gap: float = DEFAULT_COLUMN_GAP,
    overscan: int = DEFAULT_OVERSCAN,
) -> VisibleRange:
    """
    Compute the visible row and column index ranges for a scroll position.

    The work is proportional to the visible window only; totals are used as
    clamping bounds and never iterated.

    Args:
        scroll_top: Vertical scroll offset in pixels
        scroll_left: Horizontal scroll offset in pixels
        container_size: Measured container, None while not laid out
        cell_height: Height of a day cell
        cell_width: Width of a day cell
        resource_row_height: Height of the resource label row above the cells
        resource_count: Number of resources in the grid
        date_count: Number of dates in the grid
        gap: Horizontal gap between day cells
        overscan: Extra rows/columns rendered on each side

    Returns:
        Row and column ranges, clamped to [0, count)
    """
    if not is_measurable(container_size):
        return {"rows": range(0), "cols": range(0)}

    row_height = cell_height + resource_row_height
    column_width = cell_width + gap
    visible_rows, visible_columns = visible_counts(
        container_size, row_height, cell_width
    )

    first_row = math.floor(max(scroll_top, 0) / row_height)
    first_column = math.floor(max(scroll_left, 0) / column_width)

    return {
        "rows": _clamped_range(first_row, visible_rows, overscan, resource_count),
        "cols": _clamped_range(first_column, visible_columns, overscan, date_count),
    }


def visible_counts(
    container_size: Optional[ContainerSize], row_height: float, cell_width: float
) -> tuple[int, int]:
    if not is_measurable(container_size):
        return 0, 0
    assert container_size is not None
    return (
        math.ceil(container_size["height"] / row_height),
        math.ceil(container_size["width"] / cell_width),
    )


def is_measurable(container_size: Optional[ContainerSize]) -> bool:
    return (
        container_size is not None
        and container_size["width"] > 0
        and container_size["height"] > 0
    )


def _clamped_range(first: int, visible: int, overscan: int, total: int) -> range:
    low = max(0, first - overscan)
    high = min(total, first + visible + overscan)
    if high <= low:
        return range(0)
    return range(low, high)


class ViewportTracker:
    def __init__(
        self,
        cell_width: float,
        cell_height: float,
        resource_row_height: float,
        resource_count: int = 0,
        date_count: int = 0,
        gap: float = DEFAULT_COLUMN_GAP,
        overscan: int = DEFAULT_OVERSCAN,
    ) -> None:
        if cell_width <= 0 or cell_height <= 0:
            raise ValueError("cell width and height must be positive")
        if resource_row_height < 0 or gap < 0:
            raise ValueError("resource row height and gap must not be negative")
        if overscan < 0:
            raise ValueError("overscan must not be negative")

        self.cell_width = cell_width
        self.cell_height = cell_height
        self.resource_row_height = resource_row_height
        self.gap = gap
        self.overscan = overscan

        self._resource_count = resource_count
        self._date_count = date_count
        self._scroll_top: float = 0
        self._scroll_left: float = 0
        self._container_size: Optional[ContainerSize] = None
        self._has_measured = False
        self._is_hidden = True
        self._visible: VisibleRange = {"rows": range(0), "cols": range(0)}

    @property
    def column_width(self) -> float:
        return self.cell_width + self.gap

    @property
    def row_height(self) -> float:
        return self.cell_height + self.resource_row_height

    @property
    def scroll_top(self) -> float:
        return self._scroll_top

    @property
    def scroll_left(self) -> float:
        return self._scroll_left

    @property
    def container_size(self) -> Optional[ContainerSize]:
        if self._container_size is None:
            return None
        return {
            "width": self._container_size["width"],
            "height": self._container_size["height"],
        }

    @property
    def is_ready(self) -> bool:
        return is_measurable(self._container_size)

    @property
    def is_hidden(self) -> bool:
        return self._is_hidden

    @property
    def visible_rows(self) -> range:
        return self._visible["rows"]

    @property
    def visible_cols(self) -> range:
        return self._visible["cols"]

    @property
    def viewport(self) -> Viewport:
        return {
            "visible_row_indexes": tuple(self._visible["rows"]),
            "visible_column_indexes": tuple(self._visible["cols"]),
            "pixel_width": self._date_count * self.column_width,
            "pixel_height": self._resource_count * self.row_height,
        }

    def set_resource_count(self, resource_count: int) -> None:
        self._resource_count = resource_count
        self._recompute()

    def set_date_count(self, date_count: int) -> None:
        self._date_count = date_count
        self._recompute()

    def begin_resize(self) -> None:
        # Stale dimensions stay hidden until the settled measurement lands.
        self._is_hidden = True

    def measure(
        self,
        container_size: Optional[ContainerSize],
        date_index: Optional[DateIndex] = None,
    ) -> Optional[float]:
        """
        Record a settled container measurement.

        Returns the initial horizontal scroll offset on the first successful
        measurement when a ``date_index`` is given, otherwise None. An
        unusable size keeps the grid hidden.
        """
        if not is_measurable(container_size):
            self._container_size = None
            self._is_hidden = True
            self._recompute()
            return None

        assert container_size is not None
        self._container_size = {
            "width": container_size["width"],
            "height": container_size["height"],
        }
        self._is_hidden = False

        initial_scroll: Optional[float] = None
        if not self._has_measured:
            self._has_measured = True
            if date_index is not None:
                initial_scroll = self.scroll_offset_for_today(date_index)
                self._scroll_left = initial_scroll

        self._recompute()
        return initial_scroll

    def update_scroll(self, scroll_top: float, scroll_left: float) -> VisibleRange:
        self._scroll_top = max(scroll_top, 0)
        self._scroll_left = max(scroll_left, 0)
        self._recompute()
        return {"rows": self._visible["rows"], "cols": self._visible["cols"]}

    def scroll_offset_for_date(
        self, date_index: DateIndex, target: time.DateLike, lead_days: int = 0
    ) -> float:
        days = date_index.days_from_start(target) - lead_days
        return max(days, 0) * self.column_width

    def scroll_offset_for_today(self, date_index: DateIndex) -> float:
        return self.scroll_offset_for_date(date_index, date_index.today)

    def _recompute(self) -> None:
        self._visible = compute_visible(
            self._scroll_top,
            self._scroll_left,
            self._container_size,
            self.cell_height,
            self.cell_width,
            self.resource_row_height,
            self._resource_count,
            self._date_count,
            gap=self.gap,
            overscan=self.overscan,
        )
