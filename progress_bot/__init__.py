"""Progress Tracker Bot: трекинг ежедневных записей, фото и прогресса по шкале 0-10."""

__version__ = "0.1.0"
