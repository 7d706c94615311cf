"""Обработчики профиля: заполнение, просмотр, удаление."""
import logging
from datetime import date
from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    CallbackQueryHandler,
    MessageHandler,
    ConversationHandler,
    filters,
    ContextTypes,
)
from progress_bot.dates import parse_date
from progress_bot.handlers.common import NO_PROFILE_TEXT, get_storage, get_settings, get_profile_user, format_date
from progress_bot.handlers.tracking import recommendations_text
from progress_bot.keyboards.menus import get_level_keyboard, get_method_keyboard, get_delete_profile_keyboard
from progress_bot.models import MAX_LEVEL
from progress_bot.services.methods import METHODS
from progress_bot.services.photo_service import delete_upload
from progress_bot.services.projection import journey_metrics, optimal_tension
from progress_bot.services.user_service import get_or_create_user

logger = logging.getLogger(__name__)

# Состояния заполнения профиля
AGE, STARTING_LEVEL, CURRENT_LEVEL, TARGET_LEVEL, START_DATE, CIRCUMFERENCE, METHOD, TENSION = range(8)

TOTAL_STEPS = 8

# Ключи user_data, которые заполняет диалог /setup
SETUP_KEYS = (
    "user_id",
    "age",
    "starting_level",
    "current_level",
    "target_level",
    "start_date",
    "circumference",
    "method",
    "recommended_tension",
)


def clear_setup(context: ContextTypes.DEFAULT_TYPE) -> None:
    for key in SETUP_KEYS:
        context.user_data.pop(key, None)


async def setup_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Начало заполнения профиля (команда /setup или кнопка из /start)."""
    user = get_or_create_user(get_storage(context), update.effective_user)

    clear_setup(context)
    context.user_data["user_id"] = user.id

    text = (
        "👤 <b>Профиль</b>\n\n"
        f"Шаг 1/{TOTAL_STEPS}: Сколько тебе лет?\n"
        "Отправь числом (например: 32)\n\n"
        "/cancel — отмена"
    )

    if update.callback_query:
        await update.callback_query.answer()
        await update.callback_query.edit_message_text(text, parse_mode="HTML")
    else:
        await update.message.reply_text(text, parse_mode="HTML")
    return AGE


async def age_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Обработка ввода возраста."""
    try:
        age = int(update.message.text)
        if not (10 <= age <= 120):
            raise ValueError

        context.user_data["age"] = age

        await update.message.reply_text(
            "✅ Возраст сохранен\n\n"
            f"Шаг 2/{TOTAL_STEPS}: С какого уровня ты начинал?",
            reply_markup=get_level_keyboard("setup_starting"),
        )
        return STARTING_LEVEL
    except ValueError:
        await update.message.reply_text("❌ Введи корректный возраст (10-120 лет)")
        return AGE


async def starting_level_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Обработка выбора стартового уровня."""
    query = update.callback_query
    await query.answer()

    starting = int(query.data.split(":")[1])
    context.user_data["starting_level"] = starting

    await query.edit_message_text(
        "✅ Стартовый уровень сохранен\n\n"
        f"Шаг 3/{TOTAL_STEPS}: Какой у тебя уровень сейчас?",
        reply_markup=get_level_keyboard("setup_current", low=starting),
    )
    return CURRENT_LEVEL


async def current_level_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Обработка выбора текущего уровня."""
    query = update.callback_query
    await query.answer()

    context.user_data["current_level"] = int(query.data.split(":")[1])
    starting = context.user_data["starting_level"]

    if starting >= MAX_LEVEL:
        # Выше некуда, цель совпадает с максимумом
        context.user_data["target_level"] = MAX_LEVEL
        await query.edit_message_text(
            "✅ Уровень сохранен, цель — максимальный уровень\n\n"
            f"Шаг 5/{TOTAL_STEPS}: Когда ты начал?\n"
            "Отправь дату в формате ГГГГ-ММ-ДД или напиши 'сегодня'"
        )
        return START_DATE

    await query.edit_message_text(
        "✅ Уровень сохранен\n\n"
        f"Шаг 4/{TOTAL_STEPS}: Какой уровень — твоя цель?",
        reply_markup=get_level_keyboard("setup_target", low=starting + 1),
    )
    return TARGET_LEVEL


async def target_level_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Обработка выбора целевого уровня."""
    query = update.callback_query
    await query.answer()

    context.user_data["target_level"] = int(query.data.split(":")[1])

    await query.edit_message_text(
        "✅ Цель сохранена\n\n"
        f"Шаг 5/{TOTAL_STEPS}: Когда ты начал?\n"
        "Отправь дату в формате ГГГГ-ММ-ДД или напиши 'сегодня'"
    )
    return START_DATE


async def start_date_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Обработка даты старта."""
    text = update.message.text.strip().lower()
    try:
        start = date.today() if text == "сегодня" else parse_date(text)
        if start > date.today():
            raise ValueError

        context.user_data["start_date"] = start

        await update.message.reply_text(
            "✅ Дата старта сохранена\n\n"
            f"Шаг 6/{TOTAL_STEPS}: Какой обхват (в дюймах)?\n"
            "Отправь числом (например: 5.2) или '0' если не знаешь"
        )
        return CIRCUMFERENCE
    except ValueError:
        await update.message.reply_text("❌ Введи дату в формате ГГГГ-ММ-ДД (не из будущего)")
        return START_DATE


async def circumference_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Обработка обхвата."""
    try:
        value = float(update.message.text.replace(",", "."))
        if not (0 <= value <= 20):
            raise ValueError

        context.user_data["circumference"] = f"{value:g}" if value else None

        await update.message.reply_text(
            "✅ Обхват сохранен\n\n" f"Шаг 7/{TOTAL_STEPS}: Какой метод ты используешь?",
            reply_markup=get_method_keyboard("setup_method"),
        )
        return METHOD
    except ValueError:
        await update.message.reply_text("❌ Введи число от 0 до 20")
        return CIRCUMFERENCE


async def method_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Обработка выбора метода."""
    query = update.callback_query
    await query.answer()

    context.user_data["method"] = METHODS[int(query.data.split(":")[1])]
    recommended = optimal_tension(context.user_data.get("circumference"))
    context.user_data["recommended_tension"] = recommended

    await query.edit_message_text(
        f"✅ Метод: {context.user_data['method']}\n\n"
        f"Шаг 8/{TOTAL_STEPS}: Какое натяжение (в граммах)?\n"
        f"Рекомендуемое для твоего обхвата: {recommended} г\n"
        "Отправь числом или '0', чтобы взять рекомендуемое"
    )
    return TENSION


async def tension_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Обработка натяжения и сохранение профиля."""
    try:
        tension = int(update.message.text)
        if not (0 <= tension <= 5000):
            raise ValueError
    except ValueError:
        await update.message.reply_text("❌ Введи натяжение числом (0-5000 г)")
        return TENSION

    data = context.user_data
    fields = {
        "age": data["age"],
        "starting_level": data["starting_level"],
        "current_level": data["current_level"],
        "target_level": data["target_level"],
        "start_date": data["start_date"],
        "circumference": data.get("circumference"),
        "method": data["method"],
        "tension": tension or data["recommended_tension"],
    }

    try:
        user = get_storage(context).update_user(data["user_id"], fields)
    except ValueError as e:
        logger.warning(f"Профиль user_id={data['user_id']} не сохранен: {e}")
        await update.message.reply_text(f"❌ Не удалось сохранить профиль: {e}\n\nПопробуй ещё раз: /setup")
        clear_setup(context)
        return ConversationHandler.END

    clear_setup(context)

    if user is None:
        await update.message.reply_text("❌ Пользователь не найден. Начни заново: /start")
        return ConversationHandler.END

    logger.info(f"Профиль user_id={user.id} сохранен")
    await update.message.reply_text(
        "🎉 <b>Профиль сохранен!</b>\n\n"
        f"📈 Уровень: {user.current_level} (старт {user.starting_level}, цель {user.target_level})\n"
        f"🧪 Метод: {user.method}, {user.tension} г\n\n"
        "Записывай дни: /log\n"
        "Смотри прогресс: /stats",
        parse_mode="HTML",
    )
    return ConversationHandler.END


async def cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Отмена заполнения профиля."""
    await update.message.reply_text("❌ Заполнение профиля отменено.")
    clear_setup(context)
    return ConversationHandler.END


async def profile_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Показать профиль и метрики пути."""
    user = get_profile_user(update, context)
    if not user:
        await update.message.reply_text(NO_PROFILE_TEXT)
        return

    metrics = journey_metrics(user.current_level, user.starting_level, user.target_level, user.start_date)

    if metrics.projected_completion:
        eta = format_date(metrics.projected_completion)
    elif user.current_level >= user.target_level:
        eta = "цель достигнута 🎉"
    else:
        eta = "пока нет оценки"

    text = (
        f"👤 <b>Профиль {user.name or user.username}</b>\n\n"
        f"🎂 Возраст: {user.age or '—'}\n"
        f"📅 Старт: {format_date(user.start_date)} ({metrics.elapsed_days} дн.)\n"
        f"📏 Обхват: {user.circumference or '—'}\n"
        f"🧪 Метод: {user.method}, {user.tension} г\n\n"
        f"📈 Уровень: {user.current_level} (старт {user.starting_level}, цель {user.target_level})\n"
        f"🏁 Пройдено: {metrics.progress_percent}%\n"
        f"⚡ Скорость: {metrics.annual_rate:.1f} ур./год\n"
        f"🎯 Прогноз: {eta}\n\n"
        "Изменить: /setup"
    )
    recommendations = recommendations_text(user, len(get_storage(context).list_tracking_entries(user.id)))
    if recommendations:
        text += f"\n\n{recommendations}"
    await update.message.reply_text(text, parse_mode="HTML")


async def delete_profile_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Запрос подтверждения удаления профиля."""
    user = get_storage(context).get_user_by_telegram_id(update.effective_user.id)
    if not user:
        await update.message.reply_text("ℹ️ У тебя нет профиля.")
        return

    await update.message.reply_text(
        "⚠️ <b>Удалить профиль?</b>\n\n"
        "Будут удалены все записи трекинга и фото. Это нельзя отменить.",
        reply_markup=get_delete_profile_keyboard(),
        parse_mode="HTML",
    )


async def delete_profile_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Подтверждение или отмена удаления профиля."""
    query = update.callback_query
    await query.answer()

    if query.data == "profile:delete_cancel":
        await query.edit_message_text("👌 Удаление отменено.")
        return

    storage = get_storage(context)
    user = storage.get_user_by_telegram_id(update.effective_user.id)
    if not user:
        await query.edit_message_text("ℹ️ Профиль уже удален.")
        return

    uploads_dir = get_settings(context).UPLOADS_DIR
    photos = storage.list_photos(user.id) + storage.list_photos(user.id, is_reference=True)
    for photo in photos:
        try:
            delete_upload(photo.filename, uploads_dir)
        except (OSError, ValueError) as e:
            logger.warning(f"Не удалось удалить файл {photo.filename}: {e}")

    storage.delete_user(user.id)
    logger.info(f"Профиль user_id={user.id} удален вместе с {len(photos)} фото")

    await query.edit_message_text("🗑️ Профиль и все данные удалены.\n\nНачать заново: /start")


def register_handlers(application: Application) -> None:
    """Регистрация обработчиков."""
    levels = r"^{prefix}:(\d|10)$"
    text_input = filters.TEXT & ~filters.COMMAND

    conv_handler = ConversationHandler(
        entry_points=[
            CommandHandler("setup", setup_start),
            CallbackQueryHandler(setup_start, pattern="^start:setup$"),
        ],
        states={
            AGE: [MessageHandler(text_input, age_handler)],
            STARTING_LEVEL: [
                CallbackQueryHandler(starting_level_handler, pattern=levels.format(prefix="setup_starting"))
            ],
            CURRENT_LEVEL: [
                CallbackQueryHandler(current_level_handler, pattern=levels.format(prefix="setup_current"))
            ],
            TARGET_LEVEL: [
                CallbackQueryHandler(target_level_handler, pattern=levels.format(prefix="setup_target"))
            ],
            START_DATE: [MessageHandler(text_input, start_date_handler)],
            CIRCUMFERENCE: [MessageHandler(text_input, circumference_handler)],
            METHOD: [CallbackQueryHandler(method_handler, pattern=r"^setup_method:\d+$")],
            TENSION: [MessageHandler(text_input, tension_handler)],
        },
        fallbacks=[CommandHandler("cancel", cancel)],
    )
    application.add_handler(conv_handler)

    application.add_handler(CommandHandler("profile", profile_command))
    application.add_handler(CommandHandler("delete_profile", delete_profile_command))
    application.add_handler(
        CallbackQueryHandler(delete_profile_callback, pattern="^profile:delete_(confirm|cancel)$")
    )
