import pendulum
import pytest

from multicalendar.service.date_index import build_range, build_range_from_months


def test_index_holds_start_plus_i_days() -> None:
    index = build_range("2024-01-30", "2024-03-02", today="2024-02-10", tz="UTC")
    assert len(index) == 33
    for i, date in enumerate(index):
        assert date["date"] == pendulum.date(2024, 1, 30).add(days=i)
        assert index.index_of(date["formatted_date"]) == i
        assert index.index_by_date_string[date["formatted_date"]] == i


def test_single_day_range() -> None:
    index = build_range("2024-05-05", "2024-05-05", today="2024-05-01", tz="UTC")
    assert len(index) == 1
    assert index.start == index.end == pendulum.date(2024, 5, 5)
    assert len(index.month_groups) == 1


def test_end_before_start_is_rejected() -> None:
    with pytest.raises(ValueError):
        build_range("2024-02-01", "2024-01-31", today="2024-01-01", tz="UTC")


def test_flags() -> None:
    index = build_range("2024-01-04", "2024-01-08", today="2024-01-05", tz="UTC")
    dates = index.dates
    assert [date["is_past"] for date in dates] == [True, False, False, False, False]
    assert [date["is_today"] for date in dates] == [False, True, False, False, False]
    # 2024-01-06 and 2024-01-07 fall on the weekend
    assert [date["is_weekend"] for date in dates] == [False, False, True, True, False]


def test_lookup_accepts_dates_and_datetimes() -> None:
    index = build_range("2024-01-01", "2024-01-31", today="2024-01-01", tz="UTC")
    assert index.index_of(pendulum.date(2024, 1, 10)) == 9
    assert index.index_of(pendulum.datetime(2024, 1, 10, 15, tz="UTC")) == 9
    assert index.index_of("2024-01-10T08:00:00") == 9
    assert index.index_of("2024-02-01") is None


def test_date_at_out_of_range() -> None:
    index = build_range("2024-01-01", "2024-01-03", today="2024-01-01", tz="UTC")
    with pytest.raises(IndexError):
        index.date_at(3)


def test_month_groups() -> None:
    index = build_range("2024-01-30", "2024-03-02", today="2024-01-30", tz="UTC")
    groups = index.month_groups
    assert [group["first_day_of_month"] for group in groups] == [
        pendulum.date(2024, 1, 1),
        pendulum.date(2024, 2, 1),
        pendulum.date(2024, 3, 1),
    ]
    assert [len(group["days"]) for group in groups] == [2, 29, 2]


def test_month_groups_cover_every_day_in_order() -> None:
    index = build_range("2023-12-15", "2024-02-10", today="2023-12-15", tz="UTC")
    grouped = [date for group in index.month_groups for date in group["days"]]
    assert grouped == list(index.dates)
    assert not hasattr(index, "month_week_groups")


def test_range_from_months() -> None:
    index = build_range_from_months(1, 2, today="2024-03-15", tz="UTC")
    assert index.start == pendulum.date(2024, 2, 15)
    assert index.end == pendulum.date(2024, 5, 15)
    assert index.today == pendulum.date(2024, 3, 15)
    assert index.days_from_start(index.today) == 29


def test_exposed_lookup_is_a_copy() -> None:
    index = build_range("2024-01-01", "2024-01-03", today="2024-01-01", tz="UTC")
    index.index_by_date_string["2024-01-01"] = 42
    assert index.index_of("2024-01-01") == 0
