"""Скорость прогресса и прогноз даты достижения цели.

Все функции чистые: никаких обращений к БД, только арифметика.
Там, где оценка невозможна (нет прогресса, ноль дней), возвращается None —
"нет оценки", а не NaN/Infinity.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional
from progress_bot.dates import to_date_or_none

DAYS_PER_YEAR = 365
DEFAULT_TENSION = 500  # граммы
# Отклонение от рекомендуемого натяжения, которое считается нормой
TENSION_TOLERANCE = 50
# Доля дней с записями, начиная с которой режим считается регулярным
CONSISTENCY_GOOD = 70


@dataclass(frozen=True)
class JourneyMetrics:
    """Метрики пути для карточки прогресса."""

    elapsed_days: int
    levels_gained: int
    annual_rate: float
    days_per_level: Optional[float]
    projected_completion: Optional[date]
    progress_percent: int


def elapsed_days(start_date, today: Optional[date] = None) -> int:
    """Полных дней со старта (не меньше 0)."""
    start = to_date_or_none(start_date)
    if start is None:
        return 0
    today = today or date.today()
    return max(0, (today - start).days)


def day_of_journey(start_date, on: date) -> Optional[int]:
    """Номер дня пути: дата старта = день 1."""
    start = to_date_or_none(start_date)
    if start is None:
        return None
    return (on - start).days + 1


def annual_rate(levels_gained: int, days: int) -> float:
    """Уровней в год. При нуле дней 0."""
    if days <= 0:
        return 0.0
    return levels_gained / days * DAYS_PER_YEAR


def days_per_level(levels_gained: int, days: int) -> Optional[float]:
    """Дней на один уровень. None, если прогресса нет."""
    if levels_gained <= 0 or days <= 0:
        return None
    return days / levels_gained


def project_completion(
    current_level: int,
    target_level: int,
    start_date,
    starting_level: int,
    today: Optional[date] = None,
) -> Optional[date]:
    """Прогноз даты достижения целевого уровня линейной экстраполяцией.

    Returns:
        Дата или None, если цель уже достигнута, прогресса нет
        или с начала не прошло ни дня.
    """
    today = today or date.today()
    if current_level >= target_level:
        return None

    days = elapsed_days(start_date, today)
    per_level = days_per_level(current_level - starting_level, days)
    if per_level is None:
        return None

    days_remaining = (target_level - current_level) * per_level
    return today + timedelta(days=round(days_remaining))


def progress_percentage(current_level: int, starting_level: int, target_level: int) -> int:
    """Процент пути от стартового уровня к целевому (0-100)."""
    if current_level >= target_level:
        return 100
    if current_level <= starting_level:
        return 0
    total = target_level - starting_level
    return round((current_level - starting_level) / total * 100)


def to_float_or_none(value) -> Optional[float]:
    """Положительное число из строки замера или None."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def optimal_tension(circumference) -> int:
    """Рекомендуемое натяжение: 100 г на дюйм обхвата (500 г для 5")."""
    value = to_float_or_none(circumference)
    if value is None:
        return DEFAULT_TENSION
    return round(100 * value)


def compare_tension(tension, circumference) -> Optional[str]:
    """Сравнить натяжение с рекомендуемым по обхвату.

    Returns:
        "close", "lower" или "higher"; None, если обхват или натяжение не заданы
    """
    if tension is None or to_float_or_none(circumference) is None:
        return None
    recommended = optimal_tension(circumference)
    if abs(tension - recommended) <= TENSION_TOLERANCE:
        return "close"
    return "lower" if tension < recommended else "higher"


def consistency_percent(entries_count: int, days: int) -> int:
    """Процент дней с записями от числа дней пути (не больше 100)."""
    if entries_count <= 0:
        return 0
    return min(100, round(entries_count / max(days, 1) * 100))


def journey_metrics(
    current_level: int,
    starting_level: int,
    target_level: int,
    start_date,
    today: Optional[date] = None,
) -> JourneyMetrics:
    """Собрать все метрики пути для пользователя."""
    today = today or date.today()
    days = elapsed_days(start_date, today)
    gained = max(0, current_level - starting_level)

    return JourneyMetrics(
        elapsed_days=days,
        levels_gained=gained,
        annual_rate=annual_rate(gained, days),
        days_per_level=days_per_level(gained, days),
        projected_completion=project_completion(
            current_level, target_level, start_date, starting_level, today
        ),
        progress_percent=progress_percentage(current_level, starting_level, target_level),
    )
