import pytest

from multicalendar.service.date_index import build_range
from multicalendar.service.viewport import ViewportTracker, compute_visible


def test_visible_ranges_for_scrolled_grid() -> None:
    visible = compute_visible(
        scroll_top=2000,
        scroll_left=14800,
        container_size={"width": 800, "height": 600},
        cell_height=40,
        cell_width=70,
        resource_row_height=45,
        resource_count=50,
        date_count=400,
        gap=4,
        overscan=3,
    )
    assert visible["rows"] == range(20, 34)
    assert visible["cols"] == range(197, 215)


def test_ranges_are_clamped_to_counts() -> None:
    visible = compute_visible(
        scroll_top=0,
        scroll_left=0,
        container_size={"width": 800, "height": 600},
        cell_height=40,
        cell_width=70,
        resource_row_height=45,
        resource_count=3,
        date_count=5,
    )
    assert visible["rows"] == range(0, 3)
    assert visible["cols"] == range(0, 5)


def test_scrolling_past_the_end_is_clamped() -> None:
    visible = compute_visible(
        scroll_top=100000,
        scroll_left=100000,
        container_size={"width": 800, "height": 600},
        cell_height=40,
        cell_width=70,
        resource_row_height=45,
        resource_count=10,
        date_count=30,
    )
    assert visible["rows"] == range(0)
    assert visible["cols"] == range(0)


@pytest.mark.parametrize(
    "container_size",
    [None, {"width": 0, "height": 600}, {"width": 800, "height": 0}],
)
def test_unmeasured_container_shows_nothing(container_size) -> None:
    visible = compute_visible(0, 0, container_size, 40, 70, 45, 10, 30)
    assert visible["rows"] == range(0)
    assert visible["cols"] == range(0)


def test_tracker_stays_hidden_until_measured() -> None:
    tracker = ViewportTracker(70, 40, 45, resource_count=10, date_count=30)
    assert tracker.is_hidden
    assert not tracker.is_ready

    assert tracker.measure({"width": 0, "height": 0}) is None
    assert tracker.is_hidden
    assert tracker.visible_cols == range(0)

    tracker.measure({"width": 700, "height": 400})
    assert not tracker.is_hidden
    assert tracker.is_ready
    assert tracker.visible_rows == range(0, 8)
    assert tracker.visible_cols == range(0, 13)


def test_first_measure_scrolls_to_today() -> None:
    index = build_range("2024-01-01", "2024-12-31", today="2024-03-01", tz="UTC")
    tracker = ViewportTracker(70, 40, 45, resource_count=2, date_count=len(index))

    initial = tracker.measure({"width": 700, "height": 400}, index)
    assert initial == 60 * 74
    assert tracker.scroll_left == 60 * 74
    assert tracker.visible_cols == range(57, 73)

    # Later measurements keep the user's scroll position
    tracker.update_scroll(0, 0)
    assert tracker.measure({"width": 700, "height": 400}, index) is None
    assert tracker.scroll_left == 0


def test_today_before_range_scrolls_to_start() -> None:
    index = build_range("2024-06-01", "2024-06-30", today="2024-01-01", tz="UTC")
    tracker = ViewportTracker(70, 40, 45, resource_count=1, date_count=len(index))
    assert tracker.measure({"width": 700, "height": 400}, index) == 0


def test_resize_hides_until_measured() -> None:
    tracker = ViewportTracker(70, 40, 45, resource_count=1, date_count=30)
    tracker.measure({"width": 700, "height": 400})
    tracker.begin_resize()
    assert tracker.is_hidden
    tracker.measure({"width": 350, "height": 400})
    assert not tracker.is_hidden
    assert tracker.visible_cols == range(0, 8)


def test_viewport_snapshot() -> None:
    tracker = ViewportTracker(70, 40, 45, resource_count=2, date_count=10)
    tracker.measure({"width": 140, "height": 85})
    viewport = tracker.viewport
    assert viewport["visible_row_indexes"] == (0, 1)
    assert viewport["visible_column_indexes"] == (0, 1, 2, 3, 4)
    assert viewport["pixel_width"] == 740
    assert viewport["pixel_height"] == 170


def test_invalid_cell_sizes_are_rejected() -> None:
    with pytest.raises(ValueError):
        ViewportTracker(0, 40, 45)
    with pytest.raises(ValueError):
        ViewportTracker(70, 40, 45, overscan=-1)
