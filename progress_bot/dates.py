"""Разбор и нормализация дат."""
from datetime import date, datetime
from typing import Optional


def parse_date(value) -> date:
    """Привести значение к date.

    Принимает date, datetime или строку ISO ("2024-01-31", "2024-01-31T10:00:00").

    Raises:
        ValueError: значение не является датой
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            raise ValueError(f"Некорректная дата: {value!r}") from None
    raise ValueError(f"Некорректная дата: {value!r}")


def to_date_or_none(value) -> Optional[date]:
    """Как parse_date, но возвращает None вместо исключения."""
    try:
        return parse_date(value)
    except ValueError:
        return None
