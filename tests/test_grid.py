import asyncio

import pendulum
import pytest

from multicalendar import time
from multicalendar.grid import MissingDataFetchError, MultiCalendarGrid
from multicalendar.model.resource import resource_key
from multicalendar.service.date_index import build_range

RESOURCES = [{"id": 1, "name": "Sea View"}, {"id": 2, "name": "Garden"}, {"id": 3}]
CONTAINER = {"width": 700, "height": 400}


def days_in(start: str, end: str) -> list[str]:
    first = time.date_from_ymd_str(start)
    count = time.days_between(first, time.date_from_ymd_str(end)) + 1
    return [time.date_to_ymd_str(first.add(days=offset)) for offset in range(count)]


def recording_loader(calls: list, events: dict | None = None):
    async def load(resources, start, end):
        calls.append((tuple(resource_key(resource) for resource in resources), start, end))
        return [
            {
                "resource_key": resource_key(resource),
                "day_data": [{"date": date, "price": 100} for date in days_in(start, end)],
                "event_data": (events or {}).get(resource_key(resource), []),
            }
            for resource in resources
        ]

    return load


def make_grid(loader, resources=RESOURCES, **kwargs) -> MultiCalendarGrid:
    index = build_range("2024-01-01", "2024-12-31", today="2024-03-01", tz="UTC")
    return MultiCalendarGrid(
        resources,
        loader,
        date_index=index,
        fetch_debounce=0,
        resize_settle=0,
        tz="UTC",
        **kwargs,
    )


def test_mount_scrolls_to_today_and_loads_visible_window() -> None:
    calls: list = []

    async def scenario() -> MultiCalendarGrid:
        grid = make_grid(recording_loader(calls))
        grid.mount(CONTAINER)
        await grid.settle()
        return grid

    grid = asyncio.run(scenario())
    assert grid.scroll_left == 60 * 74
    assert grid.visible_column_indexes == tuple(range(57, 73))
    assert grid.visible_row_indexes == (0, 1, 2)
    assert calls == [((1, 2, 3), "2024-02-27", "2024-03-13")]
    assert grid.get_missing_data_to_load() is None
    assert grid.in_flight_generations == []


def test_scroll_bursts_collapse_into_one_load() -> None:
    calls: list = []

    async def scenario() -> MultiCalendarGrid:
        grid = make_grid(recording_loader(calls))
        grid.mount(CONTAINER)
        grid.on_scroll(0, 0)
        grid.on_scroll(0, 370)
        grid.on_scroll(0, 740)
        await grid.settle()
        return grid

    asyncio.run(scenario())
    assert calls == [((1, 2, 3), "2024-01-08", "2024-01-23")]


def test_failed_load_reports_once_and_leaves_cache_untouched() -> None:
    errors: list[MissingDataFetchError] = []

    async def failing_load(resources, start, end):
        raise ConnectionError("backend down")

    async def scenario() -> MultiCalendarGrid:
        grid = make_grid(failing_load, on_error=errors.append)
        grid.mount(CONTAINER)
        await grid.settle()
        return grid

    grid = asyncio.run(scenario())
    assert len(errors) == 1
    assert isinstance(errors[0].__cause__, ConnectionError)
    assert errors[0].missing["start"] == "2024-02-27"
    assert all(not grid.cache.get_days(key) for key in grid.cache.resource_keys)
    assert grid.get_missing_data_to_load() is not None


def test_malformed_response_is_reported_and_not_merged() -> None:
    errors: list[MissingDataFetchError] = []
    calls: list = []
    good_load = recording_loader(calls)

    async def malformed_load(resources, start, end):
        batches = await good_load(resources, start, end)
        batches[0]["event_data"] = [{"id": "x", "start": "not-a-date"}]
        return batches

    async def scenario() -> MultiCalendarGrid:
        grid = make_grid(malformed_load, on_error=errors.append)
        grid.mount(CONTAINER)
        await grid.settle()
        return grid

    grid = asyncio.run(scenario())
    assert len(errors) == 1
    assert isinstance(errors[0].__cause__, ValueError)
    assert not grid.cache.has_day(1, 57)
    assert grid.get_missing_data_to_load() is not None


def test_failed_load_without_error_callback_is_logged(caplog) -> None:
    async def failing_load(resources, start, end):
        raise ConnectionError("backend down")

    async def scenario() -> None:
        grid = make_grid(failing_load)
        grid.mount(CONTAINER)
        await grid.settle()

    asyncio.run(scenario())
    assert "Failed to load 2024-02-27..2024-03-13" in caplog.text


def test_set_resources_cancels_in_flight_loads() -> None:
    calls: list = []
    gate_holder: dict = {}

    async def gated_load(resources, start, end):
        calls.append(tuple(resource_key(resource) for resource in resources))
        await gate_holder["gate"].wait()
        return await recording_loader([])(resources, start, end)

    async def scenario() -> tuple[MultiCalendarGrid, list[int]]:
        gate_holder["gate"] = asyncio.Event()
        grid = make_grid(gated_load, resources=[{"id": 1}])
        grid.mount(CONTAINER)
        await asyncio.sleep(0.01)
        in_flight = grid.in_flight_generations

        grid.set_resources([{"id": 1}, {"id": 4}])
        gate_holder["gate"].set()
        await grid.settle()
        return grid, in_flight

    grid, in_flight = asyncio.run(scenario())
    assert len(in_flight) == 1
    assert calls == [(1,), (1, 4)]
    assert grid.cache.resource_keys == [1, 4]
    assert grid.get_missing_data_to_load() is None
    assert grid.in_flight_generations == []


def test_calendar_updated_reloads_the_range() -> None:
    calls: list = []

    async def scenario() -> None:
        grid = make_grid(recording_loader(calls))
        grid.mount(CONTAINER)
        await grid.settle()
        grid.calendar_updated(2, "2024-03-01", "2024-03-02")
        await grid.settle()

    asyncio.run(scenario())
    assert calls[1:] == [((2,), "2024-03-01", "2024-03-02")]


def test_resize_hides_grid_until_it_settles() -> None:
    async def scenario() -> list[bool]:
        grid = make_grid(recording_loader([]))
        grid.mount(CONTAINER)
        states = [grid.is_hidden]
        grid.on_resize({"width": 350, "height": 400})
        states.append(grid.is_hidden)
        await grid.settle()
        states.append(grid.is_hidden)
        return states

    assert asyncio.run(scenario()) == [False, True, False]


def test_unmeasurable_container_keeps_grid_hidden() -> None:
    calls: list = []

    async def scenario() -> MultiCalendarGrid:
        grid = make_grid(recording_loader(calls))
        grid.mount({"width": 0, "height": 0})
        await grid.settle()
        return grid

    grid = asyncio.run(scenario())
    assert grid.is_hidden
    assert not grid.is_ready
    assert grid.visible_column_indexes == ()
    assert calls == []


def test_scroll_to_date_leaves_lead_days() -> None:
    async def scenario() -> MultiCalendarGrid:
        grid = make_grid(recording_loader([]))
        grid.mount(CONTAINER)
        grid.scroll_to_date(pendulum.date(2024, 6, 1))
        await grid.settle()
        return grid

    grid = asyncio.run(scenario())
    assert grid.scroll_left == (152 - 2) * 74


class RecordingRenderer:
    def __init__(self) -> None:
        self.day_calls: list = []

    def render_resource_element(self, resource):
        return resource["id"]

    def render_day_element(self, resource, date, day_info, prev_day_info, is_selected, drag_handlers):
        self.day_calls.append((resource["id"], date["formatted_date"], is_selected))
        return (day_info, drag_handlers)

    def render_event_element(self, resource, event, position_style):
        return (event["id"], event["lane"], position_style)

    def render_day_header_element(self, date, cell_width, is_hovered):
        return (date["formatted_date"], is_hovered)


def test_render_calls_back_for_visible_cells_only() -> None:
    events = {1: [{"id": "b1", "start": "2024-03-01", "end": "2024-03-03", "title": "Smith"}]}

    async def scenario() -> MultiCalendarGrid:
        grid = make_grid(recording_loader([], events))
        grid.mount({"width": 140, "height": 85})
        await grid.settle()
        return grid

    grid = asyncio.run(scenario())
    renderer = RecordingRenderer()
    frame = grid.render(renderer)

    columns = frame["column_indexes"]
    assert columns == tuple(range(57, 65))
    assert len(renderer.day_calls) == len(frame["rows"]) * len(columns)
    assert [header["first_day_of_month"] for header in frame["month_headers"]] == [
        pendulum.date(2024, 2, 1),
        pendulum.date(2024, 3, 1),
    ]

    first_row = frame["rows"][0]
    assert first_row["max_concurrency"] == 1
    assert first_row["row_pixel_height"] == 40
    ((event_id, lane, style),) = first_row["event_elements"]
    assert (event_id, lane) == ("b1", 1)
    assert style["width"] == 148


def test_drag_handlers_drive_selection_and_hover() -> None:
    committed: list = []

    async def scenario() -> MultiCalendarGrid:
        grid = make_grid(
            recording_loader([]),
            on_date_range_selected=lambda resource, start, end: committed.append(
                (resource["id"], start, end)
            ),
        )
        grid.mount({"width": 140, "height": 85})
        await grid.settle()
        return grid

    grid = asyncio.run(scenario())
    frame = grid.render(RecordingRenderer())
    # Columns 57..64; 2024-03-01 (index 60) is today
    handlers = [handlers for _, handlers in frame["rows"][0]["day_elements"]]
    handlers[4]["on_drag_start"]()
    handlers[6]["on_drag_over"]()
    handlers[6]["on_mouse_over"]()
    assert grid.is_selected(1, 62)
    assert grid.hovered_date_index == 63

    grid.mouse_up()
    handlers[6]["on_mouse_leave"]()
    assert committed == [(1, pendulum.date(2024, 3, 2), pendulum.date(2024, 3, 4))]
    assert grid.hovered_date_index is None
    assert grid.selection is None


def test_invalid_event_row_height_is_rejected() -> None:
    with pytest.raises(ValueError):
        make_grid(recording_loader([]), event_row_height=0)
