"""Сервис для работы с пользователями."""
from telegram import User as TelegramUser
from progress_bot.models import User
from progress_bot.storage import Storage


def telegram_username(telegram_user: TelegramUser) -> str:
    """Уникальный username: из Telegram или tg<id>, если его нет."""
    return telegram_user.username or f"tg{telegram_user.id}"


def get_or_create_user(storage: Storage, telegram_user: TelegramUser) -> User:
    """Получить или создать пользователя.

    Args:
        storage: хранилище сущностей
        telegram_user: Объект пользователя из Telegram

    Returns:
        Объект User из БД
    """
    user = storage.get_user_by_telegram_id(telegram_user.id)
    if user:
        return user

    username = telegram_username(telegram_user)
    # Ник мог быть занят пользователем, созданным не через Telegram
    if storage.get_user_by_username(username):
        username = f"tg{telegram_user.id}"

    return storage.create_user(
        {
            "telegram_id": telegram_user.id,
            "username": username,
            "name": telegram_user.first_name,
        }
    )


def has_profile(user: User) -> bool:
    """Заполнен ли профиль (метод выбирается последним шагом /setup)."""
    return user is not None and user.method is not None


def bump_current_level(storage: Storage, user: User, level) -> bool:
    """Поднять текущий уровень, если замечен более высокий.

    Returns:
        True, если уровень обновлен
    """
    if level is None or level <= user.current_level:
        return False

    storage.update_user(user.id, {"current_level": level})
    user.current_level = level
    return True
