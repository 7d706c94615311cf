"""Тесты сравнения методов."""
from datetime import date, timedelta
import pytest
from progress_bot.services.methods import score_methods

START = date(2024, 1, 1)


def test_single_method_over_window():
    """10 дней метода A по 12 часов за 20 дней; метода B нет в результате."""
    entries = [
        {"date": START + timedelta(days=i), "method_used": "A", "hours_worn": 12, "comfort_level": 4}
        for i in range(10)
    ]
    stats = score_methods(entries, START, today=date(2024, 1, 21))

    assert len(stats) == 1
    assert stats[0].method == "A"
    assert stats[0].days_used == 10
    assert stats[0].average_hours == 12
    assert stats[0].average_comfort == 4
    assert stats[0].effectiveness_score == pytest.approx(0.4)


def test_rest_days_and_empty_methods_are_excluded():
    entries = [
        {"method_used": "Rest Day", "hours_worn": 0},
        {"method_used": "", "hours_worn": 5},
        {"method_used": None, "hours_worn": 5},
        {"method_used": "T-Tape", "hours_worn": 6},
    ]
    stats = score_methods(entries, START, today=date(2024, 1, 11))

    assert [s.method for s in stats] == ["T-Tape"]


def test_sorted_by_days_used_stable():
    entries = [
        {"method_used": "B", "hours_worn": 1},
        {"method_used": "C", "hours_worn": 1},
        {"method_used": "C", "hours_worn": 1},
        {"method_used": "A", "hours_worn": 1},
    ]
    stats = score_methods(entries, START, today=date(2024, 1, 11))

    # При равенстве дней сохраняется порядок первого появления
    assert [s.method for s in stats] == ["C", "B", "A"]


def test_comfort_average_ignores_missing():
    entries = [
        {"method_used": "DTR", "hours_worn": 4, "comfort_level": 5},
        {"method_used": "DTR", "hours_worn": 8, "comfort_level": None},
    ]
    [stats] = score_methods(entries, START, today=date(2024, 1, 11))

    assert stats.average_hours == 6
    assert stats.average_comfort == 5


def test_zero_elapsed_days():
    """Старт сегодня: делитель не меньше 1."""
    [stats] = score_methods([{"method_used": "A", "hours_worn": 12}], START, today=START)

    assert stats.effectiveness_score == pytest.approx(0.8)


def test_empty_input():
    assert score_methods([], START, today=date(2024, 1, 11)) == []
