"""Обработчики inline кнопок удаления записей и фото."""
import logging
from telegram import Update
from telegram.ext import Application, CallbackQueryHandler, ContextTypes
from telegram.error import TelegramError
from progress_bot.handlers.common import get_storage, get_settings
from progress_bot.services.photo_service import delete_upload

logger = logging.getLogger(__name__)


async def remove_message(query) -> None:
    """Удалить сообщение с кнопкой; если не вышло, убрать текст."""
    try:
        await query.message.delete()
    except TelegramError as e:
        logger.warning(f"Не удалось удалить сообщение: {e}")
        await query.edit_message_reply_markup(reply_markup=None)


async def delete_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработка кнопок delete_entry:<id> и delete_photo:<id>."""
    query = update.callback_query
    await query.answer()

    action, item_id = query.data.split(":")
    item_id = int(item_id)

    storage = get_storage(context)
    user = storage.get_user_by_telegram_id(update.effective_user.id)

    if action == "delete_entry":
        entry = storage.get_tracking_entry(item_id)
        if not entry or not user or entry.user_id != user.id:
            await query.message.reply_text("⚠️ Запись не найдена.")
            return

        storage.delete_tracking_entry(entry.id)
        await remove_message(query)

    elif action == "delete_photo":
        photo = storage.get_photo(item_id)
        if not photo or not user or photo.user_id != user.id:
            await query.message.reply_text("⚠️ Фото не найдено.")
            return

        storage.delete_photo(photo.id)
        try:
            delete_upload(photo.filename, get_settings(context).UPLOADS_DIR)
        except (OSError, ValueError) as e:
            logger.warning(f"Не удалось удалить файл {photo.filename}: {e}")
        await remove_message(query)


def register_handlers(application: Application) -> None:
    """Регистрация обработчиков."""
    application.add_handler(CallbackQueryHandler(delete_callback, pattern=r"^delete_(entry|photo):\d+$"))
