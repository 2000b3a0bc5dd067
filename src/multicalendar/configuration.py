# SPDX-License-Identifier: MIT

from pathlib import Path
from typing import TypedDict

import platformdirs

APP_NAME = "multicalendar"

CONFIG_PATH: Path = platformdirs.user_config_path(APP_NAME)
APP_CONFIG_PATH: Path = CONFIG_PATH / "config.yaml"


class Configuration(TypedDict):
    past_months_to_render: int
    future_months_to_render: int
    day_cell_width: int
    day_cell_height: int
    event_row_height: int
    resource_row_height: int
    column_gap: int
    overscan: int
    fetch_debounce_ms: int
    resize_settle_ms: int
    allow_selection: bool
    allow_select_in_past: bool
    show_header: bool


def default_configuration() -> Configuration:
    return {
        "past_months_to_render": 1,
        "future_months_to_render": 24,
        "day_cell_width": 70,
        "day_cell_height": 40,
        "event_row_height": 40,
        "resource_row_height": 45,
        "column_gap": 4,
        "overscan": 3,
        "fetch_debounce_ms": 100,
        "resize_settle_ms": 100,
        "allow_selection": True,
        "allow_select_in_past": False,
        "show_header": True,
    }


def validate_configuration(config: Configuration) -> None:
    """Raise ValueError for settings the grid cannot work with."""
    for key in ("day_cell_width", "day_cell_height", "event_row_height"):
        if config[key] <= 0:  # type: ignore[literal-required]
            raise ValueError(f"{key} must be positive, got {config[key]}")  # type: ignore[literal-required]
    for key in (
        "past_months_to_render",
        "future_months_to_render",
        "resource_row_height",
        "column_gap",
        "overscan",
        "fetch_debounce_ms",
        "resize_settle_ms",
    ):
        if config[key] < 0:  # type: ignore[literal-required]
            raise ValueError(f"{key} must not be negative, got {config[key]}")  # type: ignore[literal-required]
