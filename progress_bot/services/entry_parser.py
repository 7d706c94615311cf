"""Разбор текстовой записи за день.

Примеры:
    "8ч T-Tape комфорт 4"
    "2024-01-05 6.5 часов DTR 400г уровень 3 заметка: всё ок"
    "вчера отдых"
"""
import re
from datetime import date, timedelta
from typing import Optional
from progress_bot.dates import parse_date
from progress_bot.models.tracking_entry import REST_DAY
from progress_bot.services.methods import METHODS

DATE_RE = re.compile(r"(?<!\d)(\d{4}-\d{2}-\d{2})(?!\d)")
RELATIVE_DATE_RE = re.compile(r"\b(сегодня|вчера|today|yesterday)\b", re.IGNORECASE)
HOURS_RE = re.compile(r"(\d+(?:[.,]\d+)?)\s*(?:час\w*|ч|hours?|hrs?|h)\b", re.IGNORECASE)
COMFORT_RE = re.compile(r"\b(?:комфорт|comfort)\s*:?\s*(\d+)\b", re.IGNORECASE)
LEVEL_RE = re.compile(r"\b(?:уровень|level)\s*:?\s*(\d+)\b", re.IGNORECASE)
TENSION_RE = re.compile(r"(\d+)\s*(?:гр|г|g)\b", re.IGNORECASE)
REST_RE = re.compile(r"\b(?:отдых|rest)\b", re.IGNORECASE)
NOTES_RE = re.compile(r"\b(?:заметка|note)\s*:\s*", re.IGNORECASE)

YESTERDAY_WORDS = ("вчера", "yesterday")


def _method_aliases() -> list[tuple[str, str]]:
    """(псевдоним, метод): полное название и короткое до скобки, длинные первыми."""
    aliases = {}
    for method in METHODS:
        aliases[method.lower()] = method
        aliases[method.split(" (")[0].lower()] = method
    aliases["manual"] = "Manual Methods"
    return sorted(aliases.items(), key=lambda item: len(item[0]), reverse=True)


METHOD_ALIASES = _method_aliases()


def _take(pattern: re.Pattern, text: str) -> tuple[Optional[re.Match], str]:
    """Найти первое совпадение и вырезать его из текста."""
    match = pattern.search(text)
    if not match:
        return None, text
    return match, text[: match.start()] + " " + text[match.end() :]


def find_method(text: str) -> Optional[str]:
    """Метод из справочника, упомянутый в тексте."""
    for alias, method in METHOD_ALIASES:
        if re.search(rf"(?<!\w){re.escape(alias)}(?!\w)", text, re.IGNORECASE):
            return method
    return None


def parse_entry_text(text: str, today: Optional[date] = None) -> dict:
    """Разобрать запись за день в поля TrackingEntry.

    Всегда возвращает "date"; остальные ключи — только найденные в тексте.

    Raises:
        ValueError: в тексте нет ни часов, ни метода, ни отметки отдыха,
            либо значения вне допустимых диапазонов
    """
    today = today or date.today()
    fields: dict = {}

    notes_match = NOTES_RE.search(text)
    if notes_match:
        notes = text[notes_match.end() :].strip()
        text = text[: notes_match.start()]
        if notes:
            fields["notes"] = notes

    match, text = _take(DATE_RE, text)
    if match:
        fields["date"] = parse_date(match.group(1))
    else:
        match, text = _take(RELATIVE_DATE_RE, text)
        if match and match.group(1).lower() in YESTERDAY_WORDS:
            fields["date"] = today - timedelta(days=1)
        else:
            fields["date"] = today

    if fields["date"] > today:
        raise ValueError("Дата записи не может быть в будущем")

    match, text = _take(HOURS_RE, text)
    if match:
        hours = float(match.group(1).replace(",", "."))
        if not (0 <= hours <= 24):
            raise ValueError("Часы должны быть от 0 до 24")
        fields["hours_worn"] = hours

    match, text = _take(COMFORT_RE, text)
    if match:
        comfort = int(match.group(1))
        if not (1 <= comfort <= 5):
            raise ValueError("Комфорт должен быть от 1 до 5")
        fields["comfort_level"] = comfort

    match, text = _take(LEVEL_RE, text)
    if match:
        level = int(match.group(1))
        if not (0 <= level <= 10):
            raise ValueError("Уровень должен быть от 0 до 10")
        fields["level"] = level

    match, text = _take(TENSION_RE, text)
    if match:
        fields["tension_used"] = int(match.group(1))

    if REST_RE.search(text):
        fields["method_used"] = REST_DAY
        fields.setdefault("hours_worn", 0)
    else:
        method = find_method(text)
        if method:
            fields["method_used"] = method

    if "hours_worn" not in fields and "method_used" not in fields:
        raise ValueError("Не нашел в записи ни часов, ни метода")

    return fields
