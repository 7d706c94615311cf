"""Обработчики команд бота."""
from progress_bot.handlers.start import register_handlers as register_start_handlers
from progress_bot.handlers.profile import register_handlers as register_profile_handlers
from progress_bot.handlers.tracking import register_handlers as register_tracking_handlers
from progress_bot.handlers.photos import register_handlers as register_photo_handlers
from progress_bot.handlers.stats import register_handlers as register_stats_handlers
from progress_bot.handlers.callbacks import register_handlers as register_callback_handlers

__all__ = [
    "register_start_handlers",
    "register_profile_handlers",
    "register_tracking_handlers",
    "register_photo_handlers",
    "register_stats_handlers",
    "register_callback_handlers",
]
