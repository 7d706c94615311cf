"""Общие помощники обработчиков: доступ к зависимостям из bot_data."""
from datetime import date
from typing import Optional
from telegram import Update
from telegram.ext import ContextTypes
from progress_bot.config import Config
from progress_bot.models import User
from progress_bot.services.user_service import has_profile
from progress_bot.storage import Storage

NO_PROFILE_TEXT = "❌ Сначала заполни профиль: /setup"


def get_storage(context: ContextTypes.DEFAULT_TYPE) -> Storage:
    return context.bot_data["storage"]


def get_settings(context: ContextTypes.DEFAULT_TYPE) -> Config:
    return context.bot_data["config"]


def get_profile_user(update: Update, context: ContextTypes.DEFAULT_TYPE) -> Optional[User]:
    """Пользователь с заполненным профилем или None."""
    user = get_storage(context).get_user_by_telegram_id(update.effective_user.id)
    if not has_profile(user):
        return None
    return user


def format_date(value: Optional[date]) -> str:
    return value.strftime("%d.%m.%Y") if value else "—"
