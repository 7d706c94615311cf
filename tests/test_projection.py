"""Тесты скорости и прогноза."""
from datetime import date
import pytest
from progress_bot.services.projection import (
    annual_rate,
    compare_tension,
    consistency_percent,
    day_of_journey,
    days_per_level,
    elapsed_days,
    journey_metrics,
    optimal_tension,
    progress_percentage,
    project_completion,
)

START = date(2023, 1, 15)
TODAY = date(2024, 1, 15)


def test_project_completion():
    """4 уровня за 365 дней: ещё 4 уровня займут столько же."""
    assert project_completion(4, 8, START, 0, today=TODAY) == date(2025, 1, 14)


def test_project_completion_guards():
    # Цель достигнута
    assert project_completion(8, 8, START, 0, today=TODAY) is None
    # Нет прогресса
    assert project_completion(3, 8, START, 3, today=TODAY) is None
    # Старт сегодня
    assert project_completion(4, 8, TODAY, 0, today=TODAY) is None
    # Нет даты старта
    assert project_completion(4, 8, None, 0, today=TODAY) is None


def test_rates():
    assert annual_rate(4, 365) == pytest.approx(4.0)
    assert annual_rate(1, 0) == 0.0
    assert days_per_level(4, 365) == 91.25
    assert days_per_level(0, 365) is None


def test_elapsed_days_and_day_of_journey():
    assert elapsed_days(START, TODAY) == 365
    assert elapsed_days("2024-02-01", TODAY) == 0
    assert day_of_journey(START, START) == 1
    assert day_of_journey("2024-01-01", date(2024, 1, 10)) == 10
    assert day_of_journey(None, TODAY) is None


def test_progress_percentage():
    assert progress_percentage(4, 0, 8) == 50
    assert progress_percentage(0, 0, 8) == 0
    assert progress_percentage(9, 0, 8) == 100
    assert progress_percentage(3, 2, 5) == 33


def test_optimal_tension():
    assert optimal_tension("5.2") == 520
    assert optimal_tension(5) == 500
    assert optimal_tension(None) == 500
    assert optimal_tension("abc") == 500
    assert optimal_tension("0") == 500


def test_journey_metrics():
    metrics = journey_metrics(4, 0, 8, START, today=TODAY)

    assert metrics.elapsed_days == 365
    assert metrics.levels_gained == 4
    assert metrics.annual_rate == pytest.approx(4.0)
    assert metrics.days_per_level == 91.25
    assert metrics.projected_completion == date(2025, 1, 14)
    assert metrics.progress_percent == 50


def test_compare_tension():
    """Натяжение в пределах 50 г от рекомендуемого считается близким."""
    assert compare_tension(520, "5") == "close"
    assert compare_tension(450, "5") == "close"
    assert compare_tension(400, "5") == "lower"
    assert compare_tension(600, "5.2") == "higher"
    assert compare_tension(500, None) is None
    assert compare_tension(None, "5") is None


def test_consistency_percent():
    assert consistency_percent(7, 10) == 70
    assert consistency_percent(0, 10) == 0
    # Старт сегодня: деление на один день
    assert consistency_percent(1, 0) == 100
    assert consistency_percent(20, 10) == 100
