"""Генератор графиков и таблиц в PNG для отправки в чат."""
import io
import math
import logging
from typing import Optional
from PIL import Image, ImageDraw, ImageFont
from progress_bot.services.aggregation import ChartSeries
from progress_bot.services.methods import MethodStats

logger = logging.getLogger(__name__)

FONT_REGULAR = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"
FONT_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"

# Цвета
COLOR_TEXT = "#333333"
COLOR_LIGHT = "#f5f5f5"
COLOR_BORDER = "#2196F3"
COLOR_GRID = "#e0e0e0"
COLOR_BAR = "#10B981"
COLOR_LINE = "#3B82F6"
COLOR_HEADER_BG = "#e3f2fd"
COLOR_ACCENT = "#d32f2f"

# Поля области графика
MARGIN_LEFT = 60
MARGIN_RIGHT = 20
MARGIN_TOP = 50
MARGIN_BOTTOM = 60


def _load_font(path: str, size: int):
    try:
        return ImageFont.truetype(path, size)
    except OSError:
        return ImageFont.load_default()


def _to_png(img: Image.Image) -> bytes:
    img_bytes = io.BytesIO()
    img.save(img_bytes, format="PNG")
    return img_bytes.getvalue()


def _draw_axes(draw, width, height, max_value, steps, title, font, font_title) -> tuple[int, int, int, int]:
    """Рамка, сетка и подписи оси Y. Возвращает границы области графика."""
    left, top = MARGIN_LEFT, MARGIN_TOP
    right, bottom = width - MARGIN_RIGHT, height - MARGIN_BOTTOM

    draw.text((left, 15), title, font=font_title, fill=COLOR_TEXT)

    for i in range(steps + 1):
        value = max_value * i / steps
        y = bottom - (bottom - top) * i / steps
        draw.line([(left, y), (right, y)], fill=COLOR_GRID, width=1)
        label = f"{value:g}" if value == int(value) else f"{value:.1f}"
        draw.text((10, y - 7), label, font=font, fill=COLOR_TEXT)

    draw.line([(left, top), (left, bottom)], fill=COLOR_TEXT, width=2)
    draw.line([(left, bottom), (right, bottom)], fill=COLOR_TEXT, width=2)
    return left, top, right, bottom


def _draw_x_labels(draw, labels, xs, bottom, font) -> None:
    # Не больше ~12 подписей, чтобы не слипались
    every = max(1, math.ceil(len(labels) / 12))
    for i, (label, x) in enumerate(zip(labels, xs)):
        if i % every:
            continue
        draw.text((x - 18, bottom + 10), label, font=font, fill=COLOR_TEXT)


def generate_bar_chart(series: ChartSeries, title: str = "Часы", width: int = 800, height: int = 400) -> Optional[bytes]:
    """Столбчатый график (часы по месяцам/неделям)."""
    try:
        labels, values = series["labels"], series["values"]
        if not labels:
            return None

        img = Image.new("RGB", (width, height), color="white")
        draw = ImageDraw.Draw(img)
        font = _load_font(FONT_REGULAR, 12)
        font_title = _load_font(FONT_BOLD, 16)

        max_value = max(values) or 1
        left, top, right, bottom = _draw_axes(draw, width, height, max_value, 5, title, font, font_title)

        slot = (right - left) / len(values)
        bar_width = max(2, slot * 0.6)
        xs = []
        for i, value in enumerate(values):
            x_center = left + slot * (i + 0.5)
            xs.append(x_center)
            bar_top = bottom - (bottom - top) * (value / max_value)
            if value > 0:
                draw.rectangle(
                    [(x_center - bar_width / 2, bar_top), (x_center + bar_width / 2, bottom)],
                    fill=COLOR_BAR,
                )

        _draw_x_labels(draw, labels, xs, bottom, font)
        draw.rectangle([(0, 0), (width - 1, height - 1)], outline=COLOR_BORDER, width=2)
        return _to_png(img)

    except Exception as e:
        logger.error(f"Ошибка генерации графика часов: {e}")
        return None


def generate_level_chart(series: ChartSeries, title: str = "Уровень", width: int = 800, height: int = 400) -> Optional[bytes]:
    """Ступенчатый график уровня (ось Y 0-10)."""
    try:
        labels, values = series["labels"], series["values"]
        if not labels:
            return None

        img = Image.new("RGB", (width, height), color="white")
        draw = ImageDraw.Draw(img)
        font = _load_font(FONT_REGULAR, 12)
        font_title = _load_font(FONT_BOLD, 16)

        left, top, right, bottom = _draw_axes(draw, width, height, 10, 10, title, font, font_title)

        slot = (right - left) / len(values)
        xs = [left + slot * (i + 0.5) for i in range(len(values))]
        ys = [bottom - (bottom - top) * (value / 10) for value in values]

        # Ступеньки: горизонталь, затем вертикаль
        points = [(xs[0], ys[0])]
        for i in range(1, len(values)):
            points.append((xs[i], ys[i - 1]))
            points.append((xs[i], ys[i]))
        if len(points) > 1:
            draw.line(points, fill=COLOR_LINE, width=3)
        for x, y in zip(xs, ys):
            draw.ellipse([(x - 4, y - 4), (x + 4, y + 4)], fill=COLOR_LINE)

        _draw_x_labels(draw, labels, xs, bottom, font)
        draw.rectangle([(0, 0), (width - 1, height - 1)], outline=COLOR_BORDER, width=2)
        return _to_png(img)

    except Exception as e:
        logger.error(f"Ошибка генерации графика уровня: {e}")
        return None


def generate_method_table(rows: list[MethodStats]) -> Optional[bytes]:
    """Таблица сравнения методов."""
    try:
        if not rows:
            return None

        width = 720
        row_height = 40
        header_height = 45
        footer_height = 30
        height = 10 + header_height + len(rows) * row_height + footer_height

        img = Image.new("RGB", (width, height), color="white")
        draw = ImageDraw.Draw(img)

        font_header = _load_font(FONT_BOLD, 14)
        font_data = _load_font(FONT_REGULAR, 13)
        font_note = _load_font(FONT_REGULAR, 11)

        # Метод, дни, часы, комфорт, оценка
        col_widths = [260, 80, 100, 100, 160]
        col_x = [15]
        for w in col_widths[:-1]:
            col_x.append(col_x[-1] + w)

        # === ШАПКА ===
        y = 10
        draw.rectangle([(0, y), (width, y + header_height)], fill=COLOR_HEADER_BG)
        headers = ["Метод", "Дней", "Ср. часы", "Комфорт", "Уровней/год*"]
        for header, x in zip(headers, col_x):
            draw.text((x + 5, y + 14), header, font=font_header, fill=COLOR_TEXT)
        y += header_height
        draw.line([(0, y), (width, y)], fill=COLOR_BORDER, width=2)

        # === СТРОКИ ===
        for i, row in enumerate(rows):
            row_color = "white" if i % 2 == 0 else COLOR_LIGHT
            draw.rectangle([(0, y), (width, y + row_height)], fill=row_color)
            draw.line([(0, y + row_height), (width, y + row_height)], fill=COLOR_GRID, width=1)

            name = row.method[:28] if len(row.method) > 28 else row.method
            cells = [
                name,
                str(row.days_used),
                f"{row.average_hours:.1f}",
                f"{row.average_comfort:.1f}/5",
                f"{row.effectiveness_score:.2f}",
            ]
            for j, (cell, x) in enumerate(zip(cells, col_x)):
                # Самый используемый метод выделяем
                color = COLOR_ACCENT if (i == 0 and j == 4) else COLOR_TEXT
                draw.text((x + 5, y + 12), cell, font=font_data, fill=color)
            y += row_height

        draw.text((15, y + 8), "* примерная оценка, не научная модель", font=font_note, fill=COLOR_TEXT)
        draw.rectangle([(0, 0), (width - 1, height - 1)], outline=COLOR_BORDER, width=2)
        return _to_png(img)

    except Exception as e:
        logger.error(f"Ошибка генерации таблицы методов: {e}")
        return None
