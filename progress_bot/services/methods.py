"""Сравнение методов: частота, средние часы, комфорт и оценка эффективности.

Оценка эффективности — грубая эвристика (постоянство x часы), а не
проверенная модель. В интерфейсе она подписывается как примерная.
"""
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional
from progress_bot.models.tracking_entry import REST_DAY
from progress_bot.services.aggregation import field_value
from progress_bot.services.projection import elapsed_days

# Средний прирост уровней в год по данным сообщества
BASE_YEARLY_GAIN = 0.8
# Целевое число часов в день для нормировки
TARGET_DAILY_HOURS = 12

METHODS = [
    "Manual Methods",
    "T-Tape",
    "DTR (Dual Tension Restorer)",
    "TLC Tugger",
    "FIT (Foreskin Inflation Tool)",
    "CAT II Q (Compression And Tension)",
    "Weights",
    "Hyperrestore",
    "Other Device",
]


@dataclass(frozen=True)
class MethodStats:
    """Строка таблицы сравнения методов."""

    method: str
    days_used: int
    average_hours: float
    average_comfort: float
    effectiveness_score: float

    def to_dict(self) -> dict:
        return {
            "method": self.method,
            "days_used": self.days_used,
            "average_hours": self.average_hours,
            "average_comfort": self.average_comfort,
            "effectiveness_score": self.effectiveness_score,
        }


def score_methods(entries: Iterable, start_date, today: Optional[date] = None) -> list[MethodStats]:
    """Статистика по каждому использованному методу.

    Дни отдыха и записи без метода не учитываются. Методы без использования
    в результат не попадают. Сортировка — по числу дней, при равенстве
    сохраняется порядок первого появления.
    """
    totals: dict[str, dict] = {}

    for entry in entries:
        method = field_value(entry, "method_used")
        if not method or method == REST_DAY:
            continue

        stats = totals.setdefault(
            method, {"days": 0, "hours": 0.0, "comfort": 0.0, "comfort_entries": 0}
        )
        stats["days"] += 1
        stats["hours"] += field_value(entry, "hours_worn") or 0

        comfort = field_value(entry, "comfort_level")
        if comfort is not None:
            stats["comfort"] += comfort
            stats["comfort_entries"] += 1

    total_days = max(1, elapsed_days(start_date, today))

    result = []
    for method, stats in totals.items():
        average_hours = stats["hours"] / stats["days"]
        average_comfort = (
            stats["comfort"] / stats["comfort_entries"] if stats["comfort_entries"] else 0
        )
        consistency = stats["days"] / total_days
        score = BASE_YEARLY_GAIN * consistency * (average_hours / TARGET_DAILY_HOURS)

        result.append(
            MethodStats(
                method=method,
                days_used=stats["days"],
                average_hours=average_hours,
                average_comfort=average_comfort,
                effectiveness_score=score,
            )
        )

    # sorted() стабилен: равные сохраняют порядок появления
    return sorted(result, key=lambda s: s.days_used, reverse=True)
