"""Тесты агрегации по периодам."""
from datetime import date
import pytest
from progress_bot.services.aggregation import (
    aggregate,
    calendar_month,
    hours_by_month,
    hours_by_week,
    week_start,
    weekly_summary,
)

ENTRIES = [
    {"date": "2024-01-01", "method_used": "T-Tape", "hours_worn": 8},
    {"date": "2024-01-02", "method_used": "Rest Day", "hours_worn": 0},
]


def test_hours_by_month_january():
    """Часы за январь 2024: одна запись на 8 часов и день отдыха."""
    series = hours_by_month(ENTRIES, timeframe="all", today=date(2024, 1, 31))

    assert series == {"labels": ["Jan 2024"], "values": [8]}


def test_empty_months_are_zero_filled():
    series = hours_by_month(ENTRIES, timeframe="6months", today=date(2024, 3, 15))

    assert series["labels"] == ["Sep 2023", "Oct 2023", "Nov 2023", "Dec 2023", "Jan 2024", "Feb 2024", "Mar 2024"]
    assert series["values"] == [0, 0, 0, 0, 8, 0, 0]


def test_empty_input():
    assert aggregate([], today=date(2024, 1, 31)) == []
    assert hours_by_month([], today=date(2024, 1, 31)) == {"labels": [], "values": []}


def test_records_outside_window_are_ignored():
    entries = [{"date": "2022-01-01", "hours_worn": 5}, {"date": "2024-01-01", "hours_worn": 2}]
    buckets = aggregate(entries, timeframe="3months", today=date(2024, 1, 31))

    assert sum(b["value"] for b in buckets) == 2


def test_week_starts_on_sunday():
    # 2024-01-07 это воскресенье
    assert week_start(date(2024, 1, 10)) == date(2024, 1, 7)
    assert week_start(date(2024, 1, 7)) == date(2024, 1, 7)
    assert week_start(date(2024, 1, 6)) == date(2023, 12, 31)


def test_hours_by_week():
    entries = [
        {"date": "2024-01-07", "hours_worn": 3},
        {"date": "2024-01-13", "hours_worn": 4},
        {"date": "2024-01-14", "hours_worn": 5},
    ]
    series = hours_by_week(entries, timeframe="all", today=date(2024, 1, 14))

    assert series == {"labels": ["07 Jan", "14 Jan"], "values": [7, 5]}


def test_count_and_mean_reducers():
    entries = [
        {"date": "2024-01-01", "comfort_level": 4},
        {"date": "2024-01-02", "comfort_level": 2},
        {"date": "2024-01-03", "comfort_level": None},
    ]
    today = date(2024, 1, 31)

    count = aggregate(entries, reducer="count", timeframe="all", today=today)
    mean = aggregate(entries, field="comfort_level", reducer="mean", timeframe="all", today=today)

    assert count[0]["value"] == 3
    # Пустое значение не входит в среднее
    assert mean[0]["value"] == 3


def test_invalid_dates_are_skipped():
    entries = [{"date": "garbage", "hours_worn": 100}, {"date": "2024-01-01", "hours_worn": 1}]
    series = hours_by_month(entries, timeframe="all", today=date(2024, 1, 31))

    assert series["values"] == [1]


def test_invalid_arguments():
    with pytest.raises(ValueError):
        aggregate(ENTRIES, granularity="day")
    with pytest.raises(ValueError):
        aggregate(ENTRIES, reducer="max")
    with pytest.raises(ValueError):
        aggregate(ENTRIES, timeframe="decade")


def test_weekly_summary():
    entries = [
        {"date": "2024-01-07", "hours_worn": 8, "comfort_level": 4},
        {"date": "2024-01-09", "hours_worn": 6, "comfort_level": None},
        {"date": "2024-01-14", "hours_worn": 12, "comfort_level": 1},
    ]
    summary = weekly_summary(entries, today=date(2024, 1, 10))

    assert summary == {"average_hours": 7, "days_tracked": 2, "average_comfort": 4}


def test_weekly_summary_empty():
    assert weekly_summary([], today=date(2024, 1, 10)) == {
        "average_hours": 0,
        "days_tracked": 0,
        "average_comfort": 0,
    }


def test_calendar_month():
    statuses = calendar_month(ENTRIES + [{"date": "2024-02-01", "hours_worn": 5}], 2024, 1)

    assert statuses == {date(2024, 1, 1): "active", date(2024, 1, 2): "rest"}


def test_week_labels_include_year_on_long_window():
    """За окно длиннее года подписи недель не повторяются."""
    entries = [{"date": "2023-01-01", "hours_worn": 1}, {"date": "2024-01-07", "hours_worn": 2}]
    series = hours_by_week(entries, timeframe="all", today=date(2024, 1, 7))

    assert series["labels"][0] == "01 Jan 2023"
    assert series["labels"][-1] == "07 Jan 2024"
    assert len(set(series["labels"])) == len(series["labels"])
