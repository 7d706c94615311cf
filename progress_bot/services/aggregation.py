"""Агрегация записей по календарным периодам (месяц / неделя).

Каждый период окна попадает в результат, даже пустой (значение 0).
Пустой вход -> пустой результат: график показывает заглушку "нет данных".
"""
import logging
from datetime import date, timedelta
from typing import Iterable, Optional, TypedDict
from dateutil.relativedelta import relativedelta
from progress_bot.dates import to_date_or_none

logger = logging.getLogger(__name__)

# Окно: N месяцев назад от сегодня или с первой записи ("all")
TIMEFRAME_MONTHS = {"3months": 3, "6months": 6, "year": 12, "all": None}
GRANULARITIES = ("month", "week")
REDUCERS = ("sum", "count", "mean")

# Подписи не зависят от локали процесса
MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class Bucket(TypedDict):
    """Один календарный период."""

    label: str
    start: date
    end: date
    value: float


class ChartSeries(TypedDict):
    """Данные для графика."""

    labels: list[str]
    values: list[float]


class WeeklySummary(TypedDict):
    """Сводка за текущую неделю."""

    average_hours: float
    days_tracked: int
    average_comfort: float


def field_value(record, name: str):
    """Значение поля из ORM-объекта или словаря."""
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def week_start(day: date) -> date:
    """Начало недели (воскресенье)."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def period_start(day: date, granularity: str) -> date:
    if granularity == "month":
        return day.replace(day=1)
    return week_start(day)


def next_period(start: date, granularity: str) -> date:
    if granularity == "month":
        return start + relativedelta(months=1)
    return start + timedelta(days=7)


def period_label(start: date, granularity: str, with_year: bool = False) -> str:
    """Подпись периода; у недель год только по запросу."""
    if granularity == "month":
        return f"{MONTH_ABBR[start.month - 1]} {start.year}"
    label = f"{start.day:02d} {MONTH_ABBR[start.month - 1]}"
    return f"{label} {start.year}" if with_year else label


def dated_records(records: Iterable) -> list[tuple[date, object]]:
    """Пары (дата, запись); записи с нечитаемой датой пропускаются."""
    result = []
    for record in records:
        record_date = to_date_or_none(field_value(record, "date"))
        if record_date is None:
            logger.warning(f"Skipping record with invalid date: {field_value(record, 'date')!r}")
            continue
        result.append((record_date, record))
    return result


def window_start(dates: list[date], timeframe: str, today: date) -> date:
    """Начало окна агрегации."""
    if timeframe not in TIMEFRAME_MONTHS:
        raise ValueError(f"Неизвестный период: {timeframe!r}")

    months = TIMEFRAME_MONTHS[timeframe]
    if months is None:
        return min(dates)
    return today - relativedelta(months=months)


def build_buckets(start: date, end: date, granularity: str) -> list[Bucket]:
    """Все периоды, пересекающие [start, end], с нулевыми значениями."""
    buckets = []
    current = period_start(start, granularity)
    last = period_start(end, granularity)
    # Окно длиннее года: одинаковые "дд Мес" у разных недель
    with_year = (last - current).days >= 365
    while current <= last:
        following = next_period(current, granularity)
        buckets.append(
            {
                "label": period_label(current, granularity, with_year),
                "start": current,
                "end": following - timedelta(days=1),
                "value": 0,
            }
        )
        current = following
    return buckets


def aggregate(
    records: Iterable,
    granularity: str = "month",
    field: str = "hours_worn",
    reducer: str = "sum",
    timeframe: str = "6months",
    today: Optional[date] = None,
) -> list[Bucket]:
    """Сгруппировать записи по периодам и свернуть каждый период в число.

    Args:
        records: записи с полем date (ORM-объекты или словари)
        granularity: "month" или "week"
        field: поле для sum/mean (для count не используется)
        reducer: "sum", "count" или "mean"
        timeframe: "3months", "6months", "year" или "all"
        today: конец окна (по умолчанию сегодня)

    Returns:
        Список периодов по возрастанию даты
    """
    if granularity not in GRANULARITIES:
        raise ValueError(f"Неизвестная гранулярность: {granularity!r}")
    if reducer not in REDUCERS:
        raise ValueError(f"Неизвестная агрегация: {reducer!r}")

    today = today or date.today()
    dated = dated_records(records)
    if not dated:
        return []

    start = window_start([d for d, _ in dated], timeframe, today)
    buckets = build_buckets(start, max(start, today), granularity)
    index = {bucket["start"]: i for i, bucket in enumerate(buckets)}

    totals = [0.0] * len(buckets)
    counts = [0] * len(buckets)

    for record_date, record in dated:
        i = index.get(period_start(record_date, granularity))
        if i is None:
            continue

        if reducer == "count":
            counts[i] += 1
            continue

        # Пустое поле не входит в среднее и не меняет сумму
        value = field_value(record, field)
        if value is None:
            continue
        totals[i] += value
        counts[i] += 1

    for i, bucket in enumerate(buckets):
        if reducer == "count":
            bucket["value"] = counts[i]
        elif reducer == "mean":
            bucket["value"] = totals[i] / counts[i] if counts[i] else 0
        else:
            bucket["value"] = totals[i]

    return buckets


def to_series(buckets: list[Bucket]) -> ChartSeries:
    """Периоды -> {labels, values} для графика."""
    return {
        "labels": [b["label"] for b in buckets],
        "values": [b["value"] for b in buckets],
    }


def hours_by_month(entries: Iterable, timeframe: str = "6months", today: Optional[date] = None) -> ChartSeries:
    """Сумма часов по месяцам."""
    return to_series(aggregate(entries, "month", "hours_worn", "sum", timeframe, today))


def hours_by_week(entries: Iterable, timeframe: str = "3months", today: Optional[date] = None) -> ChartSeries:
    """Сумма часов по неделям."""
    return to_series(aggregate(entries, "week", "hours_worn", "sum", timeframe, today))


def weekly_summary(entries: Iterable, today: Optional[date] = None) -> WeeklySummary:
    """Средние часы, число дней и средний комфорт за текущую неделю."""
    today = today or date.today()
    start = week_start(today)
    end = start + timedelta(days=6)

    week_entries = [record for d, record in dated_records(entries) if start <= d <= end]

    total_hours = sum(field_value(e, "hours_worn") or 0 for e in week_entries)
    comforts = [
        field_value(e, "comfort_level")
        for e in week_entries
        if field_value(e, "comfort_level") is not None
    ]

    return {
        "average_hours": total_hours / len(week_entries) if week_entries else 0,
        "days_tracked": len(week_entries),
        "average_comfort": sum(comforts) / len(comforts) if comforts else 0,
    }


def calendar_month(entries: Iterable, year: int, month: int) -> dict[date, str]:
    """Статус дней месяца: "active" (были часы) или "rest" (запись без часов).

    Дни без записи в словарь не попадают.
    """
    statuses = {}
    for record_date, record in dated_records(entries):
        if record_date.year != year or record_date.month != month:
            continue
        hours = field_value(record, "hours_worn") or 0
        statuses[record_date] = "active" if hours > 0 else "rest"
    return statuses
