"""Обработчики фото прогресса и эталонных фото."""
import io
import logging
import re
from datetime import date
from pathlib import Path
from typing import Optional
from telegram import Update, InputFile
from telegram.ext import Application, CommandHandler, CallbackQueryHandler, MessageHandler, filters, ContextTypes
from progress_bot.dates import parse_date
from progress_bot.handlers.common import NO_PROFILE_TEXT, get_storage, get_settings, get_profile_user, format_date
from progress_bot.keyboards.menus import get_photo_confirm_keyboard, get_photo_keyboard
from progress_bot.models import MIN_LEVEL, MAX_LEVEL, Photo
from progress_bot.services.entry_parser import DATE_RE
from progress_bot.services.matching import suggest_level
from progress_bot.services.photo_service import save_upload, delete_upload, upload_path
from progress_bot.services.progress import LEVEL_DESCRIPTIONS, describe_level
from progress_bot.services.projection import day_of_journey
from progress_bot.services.user_service import bump_current_level, get_or_create_user

logger = logging.getLogger(__name__)

# Подпись администратора для эталонного фото: "эталон 5"
REFERENCE_RE = re.compile(r"^\s*(?:эталон|reference)\s+(\d+)\b\s*", re.IGNORECASE)

RECENT_PHOTOS = 5
PENDING_KEY = "pending_photo"

# Порядок вывода /photos: ключ -> заголовок
PHOTO_ORDERS = {
    "newest": "Сначала новые",
    "oldest": "Сначала старые",
    "level": "По уровню",
}
ORDER_WORDS = {"новые": "newest", "старые": "oldest", "уровень": "level"}


async def download_image(update: Update, context: ContextTypes.DEFAULT_TYPE) -> bytes:
    """Скачать фото или картинку, отправленную документом."""
    message = update.message
    file_id = message.photo[-1].file_id if message.photo else message.document.file_id
    file = await context.bot.get_file(file_id)

    buffer = io.BytesIO()
    await file.download_to_memory(buffer)
    return buffer.getvalue()


def parse_caption(caption: str) -> tuple[date, str]:
    """Дата из подписи (по умолчанию сегодня) и остаток как заметка."""
    match = DATE_RE.search(caption)
    if not match:
        return date.today(), caption.strip()
    notes = (caption[: match.start()] + caption[match.end() :]).strip()
    return parse_date(match.group(1)), notes


def pending_token(filename: str) -> str:
    """Метка ожидающего фото для callback_data: имя файла без расширения."""
    return Path(filename).stem


def take_pending(user_data: dict, token: str) -> Optional[dict]:
    """Забрать ожидающее фото, только если метка совпадает с кнопкой.

    Кнопки под заменённой загрузкой несут старую метку: такое фото
    остаётся ожидающим.
    """
    pending = user_data.get(PENDING_KEY)
    if not pending or pending_token(pending["filename"]) != token:
        return None
    return user_data.pop(PENDING_KEY)


def discard_pending(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Удалить файл неподтвержденного фото, если он есть."""
    pending = context.user_data.pop(PENDING_KEY, None)
    if pending:
        delete_upload(pending["filename"], get_settings(context).UPLOADS_DIR)


def photo_caption(photo: Photo) -> str:
    text = f"📷 {format_date(photo.date)}"
    if photo.day:
        text += f" (день {photo.day})"
    if photo.level is not None:
        text += f"\n📈 Уровень: {photo.level}"
    if photo.suggested_level is not None and photo.suggested_level != photo.level:
        text += f" (бот предлагал {photo.suggested_level})"
    if photo.notes:
        text += f"\n📝 {photo.notes}"
    if photo.is_reference and describe_level(photo.level):
        text += f"\n📖 {describe_level(photo.level)}"
    return text


def parse_photos_args(args: list[str]) -> tuple[Optional[int], str]:
    """Аргументы /photos: фильтр "уровень N" и порядок.

    Returns:
        (уровень или None, ключ порядка из PHOTO_ORDERS)

    Raises:
        ValueError: неизвестный аргумент или уровень вне 0..10
    """
    level = None
    order = "newest"
    words = [word.lower() for word in args]
    i = 0
    while i < len(words):
        word = words[i]
        next_word = words[i + 1] if i + 1 < len(words) else ""
        if word == "уровень" and next_word.isdigit():
            level = int(next_word)
            i += 1
        elif word.isdigit():
            level = int(word)
        elif word in ORDER_WORDS:
            order = ORDER_WORDS[word]
        else:
            raise ValueError(f"Непонятный аргумент: {args[i]}")
        i += 1

    if level is not None and not (MIN_LEVEL <= level <= MAX_LEVEL):
        raise ValueError(f"Уровень должен быть от {MIN_LEVEL} до {MAX_LEVEL}")
    return level, order


def select_photos(photos: list[Photo], level: Optional[int] = None, order: str = "newest") -> list[Photo]:
    """Фильтр по уровню и сортировка фото."""
    if level is not None:
        photos = [photo for photo in photos if photo.level == level]

    by_date = sorted(photos, key=lambda photo: (photo.date, photo.id), reverse=True)
    if order == "oldest":
        return list(reversed(by_date))
    if order == "level":
        return sorted(by_date, key=lambda photo: photo.level or 0, reverse=True)
    return by_date


async def save_reference_photo(update: Update, context: ContextTypes.DEFAULT_TYPE, data: bytes, level: int) -> None:
    """Эталонное фото уровня от администратора."""
    settings = get_settings(context)
    storage = get_storage(context)
    admin = get_or_create_user(storage, update.effective_user)

    filename = save_upload(data, settings.UPLOADS_DIR, settings.MAX_PHOTO_BYTES)
    try:
        photo = storage.create_photo(
            {
                "user_id": admin.id,
                "date": date.today(),
                "filename": filename,
                "level": level,
                "is_reference": True,
            }
        )
    except ValueError:
        delete_upload(filename, settings.UPLOADS_DIR)
        raise

    await update.message.reply_text(f"✅ Эталон уровня {photo.level} сохранен", reply_markup=get_photo_keyboard(photo.id))


async def handle_photo(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Загрузка фото: сохранить файл, предложить уровень, ждать подтверждения."""
    settings = get_settings(context)
    caption = update.message.caption or ""
    reference = REFERENCE_RE.match(caption)
    is_admin = settings.ADMIN_ID is not None and update.effective_user.id == settings.ADMIN_ID

    user = get_profile_user(update, context)
    if not user and not (reference and is_admin):
        await update.message.reply_text(NO_PROFILE_TEXT)
        return

    wait_message = await update.message.reply_text("🔍 Сравниваю с эталонами...")

    try:
        data = await download_image(update, context)

        if reference and is_admin:
            await save_reference_photo(update, context, data, int(reference.group(1)))
            await wait_message.delete()
            return

        photo_date, notes = parse_caption(caption)
        if photo_date > date.today():
            raise ValueError("Дата фото не может быть в будущем")

        filename = save_upload(data, settings.UPLOADS_DIR, settings.MAX_PHOTO_BYTES)
    except ValueError as e:
        await wait_message.edit_text(f"❌ {e}")
        return
    except Exception as e:
        logger.error(f"Ошибка загрузки фото: {e}", exc_info=True)
        await wait_message.edit_text("❌ Не удалось сохранить фото, попробуй позже.")
        return

    try:
        suggestion = suggest_level(data, context.bot_data["extractor"])
        suggested = suggestion["level"]
    except ValueError as e:
        logger.warning(f"Не удалось подобрать уровень для {filename}: {e}")
        suggested = None

    discard_pending(context)
    context.user_data[PENDING_KEY] = {
        "filename": filename,
        "date": photo_date,
        "notes": notes or None,
        "suggested_level": suggested,
    }

    if suggested is None:
        text = "📷 Фото сохранено. Выбери уровень:"
    else:
        text = f"📷 Похоже на уровень <b>{suggested}</b>. Подтверди или выбери другой:"
    keyboard = get_photo_confirm_keyboard(pending_token(filename), suggested)
    await wait_message.edit_text(text, reply_markup=keyboard, parse_mode="HTML")


async def photo_level_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Подтверждение уровня или отмена загруженного фото."""
    query = update.callback_query
    await query.answer()

    action, token, *rest = query.data.split(":")
    pending = take_pending(context.user_data, token)
    if not pending:
        await query.edit_message_text("⚠️ Фото не найдено или уже заменено новым, отправь его заново.")
        return

    uploads_dir = get_settings(context).UPLOADS_DIR
    if action == "photo_cancel":
        delete_upload(pending["filename"], uploads_dir)
        await query.edit_message_text("🗑️ Фото удалено.")
        return

    user = get_profile_user(update, context)
    if not user:
        delete_upload(pending["filename"], uploads_dir)
        await query.edit_message_text(NO_PROFILE_TEXT)
        return

    level = int(rest[0])
    storage = get_storage(context)

    try:
        photo = storage.create_photo(
            {
                "user_id": user.id,
                "date": pending["date"],
                "filename": pending["filename"],
                "level": level,
                "suggested_level": pending["suggested_level"],
                "day": day_of_journey(user.start_date, pending["date"]),
                "notes": pending["notes"],
            }
        )
    except Exception as e:
        logger.error(f"Ошибка сохранения фото: {e}", exc_info=True)
        delete_upload(pending["filename"], uploads_dir)
        await query.edit_message_text("❌ Не удалось сохранить фото, попробуй позже.")
        return

    text = f"✅ Фото сохранено\n\n{photo_caption(photo)}"
    if bump_current_level(storage, user, photo.level):
        text += f"\n\n🎉 Новый уровень: {photo.level}!"

    await query.edit_message_text(text, reply_markup=get_photo_keyboard(photo.id))


async def send_photos(update: Update, context: ContextTypes.DEFAULT_TYPE, photos: list[Photo]) -> None:
    """Отправить фото из каталога загрузок с подписью и кнопкой удаления."""
    uploads_dir = get_settings(context).UPLOADS_DIR
    for photo in photos:
        path = upload_path(photo.filename, uploads_dir)
        if not path.exists():
            logger.warning(f"Файл {photo.filename} не найден")
            await update.message.reply_text(
                f"{photo_caption(photo)}\n⚠️ Файл не найден", reply_markup=get_photo_keyboard(photo.id)
            )
            continue

        with path.open("rb") as f:
            await update.message.reply_photo(
                photo=InputFile(f, filename=photo.filename),
                caption=photo_caption(photo),
                reply_markup=get_photo_keyboard(photo.id),
            )


async def photos_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Фото прогресса: /photos [уровень N] [новые|старые|уровень]."""
    user = get_profile_user(update, context)
    if not user:
        await update.message.reply_text(NO_PROFILE_TEXT)
        return

    try:
        level, order = parse_photos_args(context.args or [])
    except ValueError as e:
        await update.message.reply_text(f"❌ {e}\n\nПример: /photos уровень 3 старые")
        return

    photos = get_storage(context).list_photos(user.id)
    if not photos:
        await update.message.reply_text("📭 Фото пока нет. Просто отправь фото в чат.")
        return

    selected = select_photos(photos, level, order)
    if not selected:
        await update.message.reply_text(f"📭 Фото с уровнем {level} нет.")
        return

    shown = selected[:RECENT_PHOTOS]
    await update.message.reply_text(f"📷 {PHOTO_ORDERS[order]} ({len(shown)} из {len(selected)}):")
    await send_photos(update, context, shown)


async def reference_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Эталонные фото уровней с описаниями."""
    photos = get_storage(context).list_reference_photos()
    if not photos:
        lines = [f"<b>{level}</b>: {text}" for level, text in LEVEL_DESCRIPTIONS.items()]
        await update.message.reply_text(
            "📭 Эталонных фото пока нет.\n\n📖 <b>Уровни</b>\n" + "\n".join(lines),
            parse_mode="HTML",
        )
        return

    await send_photos(update, context, photos)


def register_handlers(application: Application) -> None:
    """Регистрация обработчиков."""
    application.add_handler(CommandHandler("photos", photos_command))
    application.add_handler(CommandHandler("reference", reference_command))

    # Фото и картинки, отправленные файлом
    photo_handler = MessageHandler(filters.PHOTO | filters.Document.IMAGE, handle_photo)
    application.add_handler(photo_handler)

    application.add_handler(
        CallbackQueryHandler(photo_level_callback, pattern=r"^(photo_level:[\w-]+:\d+|photo_cancel:[\w-]+)$")
    )
