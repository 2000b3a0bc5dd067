# SPDX-License-Identifier: MIT

from typing import TypedDict


class ContainerSize(TypedDict):
    width: float
    height: float


class VisibleRange(TypedDict):
    rows: range
    cols: range


class Viewport(TypedDict):
    visible_row_indexes: tuple[int, ...]
    visible_column_indexes: tuple[int, ...]
    pixel_width: float
    pixel_height: float
