"""Отслеживание достигнутого уровня во времени.

Уровень считается необратимым: наблюдение с меньшим или равным уровнем
не понижает текущий. Это допущение предметной области, а не ошибка данных.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from itertools import chain
from typing import Iterable, NamedTuple, Optional
from progress_bot.dates import to_date_or_none
from progress_bot.services.aggregation import ChartSeries, build_buckets, field_value, window_start
from progress_bot.services.projection import day_of_journey, days_per_level, elapsed_days

logger = logging.getLogger(__name__)

# Описание уровней 0-10 для справки и эталонных фото
LEVEL_DESCRIPTIONS = {
    0: "Кожа натянута, запаса нет даже в покое, при эрекции дискомфорт.",
    1: "Минимальный запас кожи в покое, при эрекции всё ещё натянута.",
    2: "Есть запас в покое, при эрекции натянута.",
    3: "Запас заметнее, при подтягивании частично закрывает головку.",
    4: "С подтягиванием закрывает головку, при эрекции легкое натяжение.",
    5: "В покое сама закрывает головку и легко сдвигается.",
    6: "Закрывает головку с небольшим избытком, при эрекции собирается за головкой.",
    7: "Закрывает головку с избытком и держится без поддержки.",
    8: "Стабильное покрытие с избытком, поправлять почти не нужно.",
    9: "Полное покрытие с избытком в любых условиях, почти полное восстановление.",
    10: "Полное восстановление: покрытие со значительным избытком.",
}


def describe_level(level: Optional[int]) -> str:
    """Описание уровня или пустая строка для неизвестного."""
    return LEVEL_DESCRIPTIONS.get(level, "")


class Observation(NamedTuple):
    """Уровень, замеченный в конкретный день."""

    date: date
    level: int


@dataclass(frozen=True)
class Milestone:
    """Первое достижение уровня (или прогноз)."""

    level: int
    date: date
    day: Optional[int] = None
    is_projected: bool = False

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "date": self.date,
            "day_ordinal": self.day,
            "is_projected": self.is_projected,
        }


@dataclass
class LevelHistory:
    """Ступенчатая функция "уровень на дату"."""

    starting_level: int
    milestones: list[Milestone] = field(default_factory=list)

    @property
    def current_level(self) -> int:
        if self.milestones:
            return self.milestones[-1].level
        return self.starting_level

    def level_at(self, on: date) -> int:
        level = self.starting_level
        for milestone in self.milestones:
            if milestone.date > on:
                break
            level = milestone.level
        return level


def collect_observations(entries: Iterable = (), photos: Iterable = ()) -> list[Observation]:
    """Наблюдения уровня из записей трекинга и фото.

    Эталонные фото и записи без уровня пропускаются.
    """
    observations = []
    for record in chain(entries, photos):
        if field_value(record, "is_reference"):
            continue
        level = field_value(record, "level")
        if level is None:
            continue
        record_date = to_date_or_none(field_value(record, "date"))
        if record_date is None:
            logger.warning(f"Skipping observation with invalid date: {field_value(record, 'date')!r}")
            continue
        observations.append(Observation(record_date, int(level)))
    return observations


def track_levels(
    observations: Iterable[Observation],
    starting_level: int = 0,
    start_date=None,
) -> LevelHistory:
    """Построить историю уровней по наблюдениям в любом порядке."""
    history = LevelHistory(starting_level=starting_level)
    current = starting_level

    for observation in sorted(observations, key=lambda o: o.date):
        if observation.level > current:
            current = observation.level
            history.milestones.append(
                Milestone(
                    level=current,
                    date=observation.date,
                    day=day_of_journey(start_date, observation.date),
                )
            )

    return history


def level_series(
    observations: Iterable[Observation],
    starting_level: int = 0,
    timeframe: str = "all",
    today: Optional[date] = None,
) -> ChartSeries:
    """Уровень по месяцам для графика.

    Значение месяца — уровень на его последний день; месяцы без наблюдений
    наследуют предыдущий уровень. Наблюдения до начала окна учитываются
    в стартовом уровне.
    """
    observations = list(observations)
    if not observations:
        return {"labels": [], "values": []}

    today = today or date.today()
    history = track_levels(observations, starting_level)
    start = window_start([o.date for o in observations], timeframe, today)
    buckets = build_buckets(start, max(start, today), "month")

    return {
        "labels": [b["label"] for b in buckets],
        "values": [history.level_at(b["end"]) for b in buckets],
    }


def project_milestones(
    current_level: int,
    target_level: int,
    per_level: Optional[float],
    today: Optional[date] = None,
    start_date=None,
) -> list[Milestone]:
    """Прогнозные вехи для уровней от текущего+1 до целевого."""
    if per_level is None or per_level <= 0:
        return []

    today = today or date.today()
    projected = []
    for level in range(current_level + 1, target_level + 1):
        estimated = today + timedelta(days=round((level - current_level) * per_level))
        projected.append(
            Milestone(
                level=level,
                date=estimated,
                day=day_of_journey(start_date, estimated),
                is_projected=True,
            )
        )
    return projected


def build_milestones(
    observations: Iterable[Observation],
    starting_level: int,
    current_level: int,
    target_level: int,
    start_date,
    today: Optional[date] = None,
) -> list[Milestone]:
    """Пройденные и прогнозные вехи, по возрастанию уровня."""
    today = today or date.today()
    history = track_levels(observations, starting_level, start_date)

    reached = max(current_level, history.current_level)
    gained = current_level - starting_level
    per_level = days_per_level(gained, elapsed_days(start_date, today))
    future = project_milestones(reached, target_level, per_level, today, start_date)

    return sorted(history.milestones + future, key=lambda m: m.level)
