"""Тесты разбора текстовой записи."""
from datetime import date
import pytest
from progress_bot.models import REST_DAY
from progress_bot.services.entry_parser import find_method, parse_entry_text

TODAY = date(2024, 1, 10)


def test_simple_entry():
    fields = parse_entry_text("8ч T-Tape комфорт 4", today=TODAY)

    assert fields == {
        "date": TODAY,
        "hours_worn": 8.0,
        "comfort_level": 4,
        "method_used": "T-Tape",
    }


def test_full_entry():
    fields = parse_entry_text("2024-01-05 6.5ч DTR 400г уровень 3 заметка: всё ок", today=TODAY)

    assert fields == {
        "date": date(2024, 1, 5),
        "hours_worn": 6.5,
        "level": 3,
        "tension_used": 400,
        "method_used": "DTR (Dual Tension Restorer)",
        "notes": "всё ок",
    }


def test_hours_variants():
    assert parse_entry_text("6,5 часов", today=TODAY)["hours_worn"] == 6.5
    assert parse_entry_text("3 часа", today=TODAY)["hours_worn"] == 3
    assert parse_entry_text("10h", today=TODAY)["hours_worn"] == 10
    assert parse_entry_text("7 hours", today=TODAY)["hours_worn"] == 7


def test_relative_dates():
    assert parse_entry_text("вчера 8ч", today=TODAY)["date"] == date(2024, 1, 9)
    assert parse_entry_text("сегодня 8ч", today=TODAY)["date"] == TODAY


def test_rest_day():
    fields = parse_entry_text("вчера отдых", today=TODAY)

    assert fields == {"date": date(2024, 1, 9), "method_used": REST_DAY, "hours_worn": 0}


def test_method_without_hours():
    fields = parse_entry_text("Manual", today=TODAY)

    assert fields == {"date": TODAY, "method_used": "Manual Methods"}


def test_find_method():
    assert find_method("CAT II Q весь день") == "CAT II Q (Compression And Tension)"
    assert find_method("tlc tugger") == "TLC Tugger"
    assert find_method("просто текст") is None


@pytest.mark.parametrize(
    "text",
    [
        "привет",
        "25ч T-Tape",
        "8ч комфорт 7",
        "8ч уровень 12",
        "2999-01-01 8ч",
        "2024-13-45 8ч",
    ],
)
def test_invalid_entries(text):
    with pytest.raises(ValueError):
        parse_entry_text(text, today=TODAY)
