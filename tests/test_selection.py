from typing import Optional

import pendulum

from multicalendar.service.date_index import build_range
from multicalendar.service.selection import SelectionController

RESOURCES = {"R1": {"id": "R1"}, "R2": {"id": "R2"}}


def lookup(key) -> Optional[dict]:
    return RESOURCES.get(key)


def make_controller(today: str = "2024-01-01", **kwargs) -> SelectionController:
    index = build_range("2024-01-01", "2024-01-10", today=today, tz="UTC")
    return SelectionController(index, lookup, **kwargs)


def test_drag_backwards_extends_start() -> None:
    commits = []
    controller = make_controller(
        on_date_range_selected=lambda resource, start, end: commits.append(
            (resource["id"], start, end)
        )
    )

    assert controller.drag_start("R1", 5)
    assert controller.state == "dragging"
    controller.drag_over(2)
    assert controller.selection == {"resource_key": "R1", "start_index": 2, "end_index": 5}

    commit = controller.mouse_up()
    assert commit is not None
    assert commit["start"] == pendulum.date(2024, 1, 3)
    assert commit["end"] == pendulum.date(2024, 1, 6)
    assert commits == [("R1", pendulum.date(2024, 1, 3), pendulum.date(2024, 1, 6))]
    assert controller.state == "idle"

    assert controller.mouse_up() is None
    assert len(commits) == 1


def test_drag_forwards_extends_end() -> None:
    controller = make_controller()
    controller.drag_start("R1", 3)
    controller.drag_over(4)
    controller.drag_over(7)
    assert controller.selection == {"resource_key": "R1", "start_index": 3, "end_index": 7}
    assert controller.is_selected("R1", 5)
    assert not controller.is_selected("R2", 5)
    assert not controller.is_selected("R1", 8)


def test_past_days_are_not_selectable() -> None:
    controller = make_controller(today="2024-01-05")
    assert not controller.drag_start("R1", 2)
    assert controller.state == "idle"

    assert controller.drag_start("R1", 6)
    controller.drag_over(1)
    assert controller.selection == {"resource_key": "R1", "start_index": 6, "end_index": 6}


def test_past_days_can_be_allowed() -> None:
    controller = make_controller(today="2024-01-05", allow_select_in_past=True)
    assert controller.drag_start("R1", 2)


def test_selection_can_be_disabled() -> None:
    controller = make_controller(allow_selection=False)
    assert not controller.drag_start("R1", 5)


def test_only_one_selection_exists() -> None:
    controller = make_controller()
    controller.drag_start("R1", 2)
    controller.drag_start("R2", 6)
    assert not controller.is_selected("R1", 2)
    assert controller.is_selected("R2", 6)


def test_clear_returns_to_idle_without_commit() -> None:
    commits = []
    controller = make_controller(
        on_date_range_selected=lambda *args: commits.append(args)
    )
    controller.drag_start("R1", 2)
    controller.clear()
    assert controller.state == "idle"
    assert controller.mouse_up() is None
    assert commits == []


def test_selection_on_removed_resource_is_dropped() -> None:
    controller = make_controller()
    controller.drag_start("R9", 2)
    assert controller.mouse_up() is None
    assert controller.state == "idle"
