"""Обработчики команд /start и /help."""
from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import Application, CommandHandler, CallbackQueryHandler, ContextTypes
from progress_bot.handlers.common import NO_PROFILE_TEXT, get_storage, get_profile_user
from progress_bot.keyboards.menus import get_main_keyboard, get_stats_keyboard
from progress_bot.services.user_service import get_or_create_user, has_profile

LOG_HINT = (
    "📝 Отправь запись за день, например:\n"
    "• <code>8ч T-Tape комфорт 4</code>\n"
    "• <code>2024-01-05 6.5ч DTR 400г уровень 3 заметка: всё ок</code>\n"
    "• /rest — день отдыха\n\n"
    "Повторная запись за ту же дату обновит существующую."
)

PHOTO_HINT = (
    "📷 Отправь фото прогресса — я предложу уровень по эталонам, "
    "а ты подтвердишь или выберешь другой.\n"
    "В подписи можно указать дату: <code>2024-01-05</code>"
)


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработка команды /start."""
    user = get_or_create_user(get_storage(context), update.effective_user)

    if not has_profile(user):
        keyboard = [[InlineKeyboardButton("📝 Заполнить профиль", callback_data="start:setup")]]
        await update.message.reply_text(
            "👋 Привет! Я помогу отслеживать ежедневный прогресс.\n\n"
            "Записывай часы и метод, присылай фото — я посчитаю скорость "
            "и спрогнозирую, когда ты достигнешь цели.\n\n"
            "Для начала нужно заполнить профиль:",
            reply_markup=InlineKeyboardMarkup(keyboard),
        )
        return

    await update.message.reply_text(
        f"👋 С возвращением, {user.name or 'друг'}!\n\n"
        f"📈 Текущий уровень: {user.current_level} из {user.target_level}",
        reply_markup=get_main_keyboard(),
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработка команды /help."""
    text = (
        "📖 <b>Команды бота:</b>\n\n"
        "📝 <b>Трекинг:</b>\n"
        "/log - Записать день\n"
        "/rest - День отдыха\n"
        "/entries - Последние записи\n"
        "/week - Сводка за неделю\n"
        "/calendar - Календарь месяца\n\n"
        "📷 <b>Фото:</b>\n"
        "/photos - Мои фото (уровень N, старые, новые, уровень)\n"
        "/reference - Эталоны уровней\n\n"
        "👤 <b>Профиль:</b>\n"
        "/setup - Заполнить или изменить профиль\n"
        "/profile - Мои данные\n"
        "/delete_profile - Удалить профиль и все данные\n\n"
        "📊 <b>Статистика:</b>\n"
        "/stats - Графики, методы, прогноз\n\n"
        "❓ /help - Эта справка"
    )
    await update.message.reply_text(text, parse_mode="HTML")


async def start_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработка inline-кнопок из /start (start:setup ловит диалог /setup)."""
    query = update.callback_query
    await query.answer()

    if query.data == "start:log":
        await query.edit_message_text(LOG_HINT, parse_mode="HTML")
    elif query.data == "start:photo":
        await query.edit_message_text(PHOTO_HINT, parse_mode="HTML")
    elif query.data == "start:stats":
        if not get_profile_user(update, context):
            await query.edit_message_text(NO_PROFILE_TEXT)
            return
        await query.edit_message_text(
            "📊 Выбери раздел статистики:",
            reply_markup=get_stats_keyboard(),
        )


def register_handlers(application: Application) -> None:
    """Регистрация обработчиков."""
    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))

    application.add_handler(CallbackQueryHandler(start_callback, pattern=r"^start:(log|photo|stats)$"))
