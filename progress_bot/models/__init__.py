"""Модели базы данных."""
from progress_bot.models.base import BaseModel, TimestampMixin, MIN_LEVEL, MAX_LEVEL
from progress_bot.models.user import User
from progress_bot.models.tracking_entry import TrackingEntry, REST_DAY
from progress_bot.models.photo import Photo

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "MIN_LEVEL",
    "MAX_LEVEL",
    "User",
    "TrackingEntry",
    "REST_DAY",
    "Photo",
]
