"""Тесты генерации графиков."""
import io
from PIL import Image
from progress_bot.services.chart_generator import generate_bar_chart, generate_level_chart, generate_method_table
from progress_bot.services.methods import MethodStats

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def test_bar_chart():
    """Тест генерации столбчатого графика."""
    png = generate_bar_chart({"labels": ["Dec 2023", "Jan 2024"], "values": [0, 8]}, "Часы")

    assert png.startswith(PNG_SIGNATURE)
    with Image.open(io.BytesIO(png)) as img:
        assert img.size == (800, 400)


def test_bar_chart_all_zero():
    assert generate_bar_chart({"labels": ["Jan 2024"], "values": [0]}) is not None


def test_level_chart():
    png = generate_level_chart({"labels": ["Jan 2024", "Feb 2024", "Mar 2024"], "values": [1, 3, 3]})

    assert png.startswith(PNG_SIGNATURE)


def test_empty_series_gives_no_chart():
    assert generate_bar_chart({"labels": [], "values": []}) is None
    assert generate_level_chart({"labels": [], "values": []}) is None
    assert generate_method_table([]) is None


def test_method_table():
    rows = [
        MethodStats("T-Tape", 10, 12.0, 4.0, 0.4),
        MethodStats("CAT II Q (Compression And Tension)", 2, 6.5, 3.5, 0.05),
    ]
    png = generate_method_table(rows)

    assert png.startswith(PNG_SIGNATURE)


def test_broken_series_returns_none():
    """Ошибка при рисовании не пробрасывается наружу."""
    assert generate_bar_chart({"labels": ["a"], "values": ["not a number"]}) is None
