"""Базовые классы и валидаторы для моделей SQLAlchemy."""
from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.sql import func
from progress_bot.database import Base

MIN_LEVEL = 0
MAX_LEVEL = 10


class TimestampMixin:
    """Миксин для автоматического создания временных меток."""

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class BaseModel(Base, TimestampMixin):
    """Базовая модель для всех таблиц.

    sqlite_autoincrement: id не переиспользуются после удаления.
    """

    __abstract__ = True
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)


def check_level(field: str, value, nullable: bool = True):
    """Уровень прогресса: целое 0..10 (None только для необязательных полей)."""
    if value is None:
        if nullable:
            return None
        raise ValueError(f"{field}: уровень обязателен")
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise ValueError(f"{field}: уровень должен быть целым числом, получено {value!r}")
    value = int(value)
    if not (MIN_LEVEL <= value <= MAX_LEVEL):
        raise ValueError(f"{field}: уровень должен быть от {MIN_LEVEL} до {MAX_LEVEL}, получено {value}")
    return value


def check_range(field: str, value, low=None, high=None, nullable: bool = True):
    """Числовое поле в заданных границах."""
    if value is None:
        if nullable:
            return None
        raise ValueError(f"{field}: значение обязательно")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field}: ожидалось число, получено {value!r}")
    if low is not None and value < low:
        raise ValueError(f"{field}: значение {value} меньше {low}")
    if high is not None and value > high:
        raise ValueError(f"{field}: значение {value} больше {high}")
    return value


def check_required_text(field: str, value) -> str:
    """Непустая строка без пробелов по краям."""
    if value is None or not str(value).strip():
        raise ValueError(f"{field}: значение обязательно")
    return str(value).strip()
