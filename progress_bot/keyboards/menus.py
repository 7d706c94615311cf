"""Inline-клавиатуры бота."""
from typing import Optional
from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from progress_bot.models import MIN_LEVEL, MAX_LEVEL
from progress_bot.services.methods import METHODS


def get_main_keyboard() -> InlineKeyboardMarkup:
    """Главное меню под /start."""
    keyboard = [
        [InlineKeyboardButton("📝 Записать день", callback_data="start:log")],
        [InlineKeyboardButton("📷 Добавить фото", callback_data="start:photo")],
        [InlineKeyboardButton("📊 Статистика", callback_data="start:stats")],
    ]
    return InlineKeyboardMarkup(keyboard)


def get_stats_keyboard() -> InlineKeyboardMarkup:
    """Выбор раздела статистики."""
    keyboard = [
        [InlineKeyboardButton("⏱️ Часы по месяцам", callback_data="stats:hours")],
        [InlineKeyboardButton("📅 Часы по неделям", callback_data="stats:weeks")],
        [InlineKeyboardButton("📈 Уровень", callback_data="stats:level")],
        [InlineKeyboardButton("🧪 Методы", callback_data="stats:methods")],
        [InlineKeyboardButton("🎯 Прогноз и вехи", callback_data="stats:journey")],
    ]
    return InlineKeyboardMarkup(keyboard)


def get_entry_keyboard(entry_id: int) -> InlineKeyboardMarkup:
    """Кнопки под записью трекинга.

    Args:
        entry_id: ID записи в БД
    """
    keyboard = [[InlineKeyboardButton("❌ Удалить", callback_data=f"delete_entry:{entry_id}")]]
    return InlineKeyboardMarkup(keyboard)


def get_photo_keyboard(photo_id: int) -> InlineKeyboardMarkup:
    """Кнопки под сохранённым фото."""
    keyboard = [[InlineKeyboardButton("❌ Удалить", callback_data=f"delete_photo:{photo_id}")]]
    return InlineKeyboardMarkup(keyboard)


def get_level_keyboard(prefix: str, suggested: Optional[int] = None, low: int = MIN_LEVEL) -> InlineKeyboardMarkup:
    """Выбор уровня: кнопки low..10 по 4 в ряд, предложенный отмечен ✅.

    Args:
        prefix: префикс callback_data (например "photo_level")
        suggested: уровень, который предлагает бот
        low: минимальный уровень в выборе
    """
    buttons = []
    for level in range(low, MAX_LEVEL + 1):
        text = f"✅ {level}" if level == suggested else str(level)
        buttons.append(InlineKeyboardButton(text, callback_data=f"{prefix}:{level}"))

    keyboard = [buttons[i : i + 4] for i in range(0, len(buttons), 4)]
    return InlineKeyboardMarkup(keyboard)


def get_photo_confirm_keyboard(token: str, suggested: Optional[int]) -> InlineKeyboardMarkup:
    """Подтверждение уровня для загруженного фото.

    Args:
        token: метка ожидающего фото, кнопки старых загрузок с ней не совпадут
        suggested: уровень, который предлагает бот
    """
    keyboard = list(get_level_keyboard(f"photo_level:{token}", suggested).inline_keyboard)
    keyboard.append([InlineKeyboardButton("🗑️ Отмена", callback_data=f"photo_cancel:{token}")])
    return InlineKeyboardMarkup(keyboard)


def get_method_keyboard(prefix: str) -> InlineKeyboardMarkup:
    """Выбор метода. В callback_data индекс: длинные названия не влезают в 64 байта."""
    keyboard = [
        [InlineKeyboardButton(method, callback_data=f"{prefix}:{i}")]
        for i, method in enumerate(METHODS)
    ]
    return InlineKeyboardMarkup(keyboard)


def get_delete_profile_keyboard() -> InlineKeyboardMarkup:
    keyboard = [
        [
            InlineKeyboardButton("🗑️ Да, удалить всё", callback_data="profile:delete_confirm"),
            InlineKeyboardButton("◀️ Отмена", callback_data="profile:delete_cancel"),
        ]
    ]
    return InlineKeyboardMarkup(keyboard)
