"""Обработчики статистики: графики, методы, прогноз."""
import io
import logging
from typing import Optional
from telegram import Update, InputFile
from telegram.ext import Application, CommandHandler, CallbackQueryHandler, ContextTypes
from progress_bot.handlers.common import NO_PROFILE_TEXT, get_storage, get_settings, get_profile_user, format_date
from progress_bot.keyboards.menus import get_stats_keyboard
from progress_bot.models import User
from progress_bot.services.aggregation import hours_by_month, hours_by_week
from progress_bot.services.chart_generator import generate_bar_chart, generate_level_chart, generate_method_table
from progress_bot.services.methods import score_methods
from progress_bot.services.progress import collect_observations, level_series, build_milestones
from progress_bot.services.projection import journey_metrics

logger = logging.getLogger(__name__)


def series_text(series: dict, unit: str) -> str:
    """Текстовая версия графика, если картинку построить не удалось."""
    return "\n".join(f"{label}: {value:g} {unit}".rstrip() for label, value in zip(series["labels"], series["values"]))


def hours_section(entries: list, by_week: bool = False) -> tuple[str, Optional[bytes]]:
    if by_week:
        series = hours_by_week(entries)
        title = "Часы по неделям (3 месяца)"
    else:
        series = hours_by_month(entries)
        title = "Часы по месяцам (6 месяцев)"

    if not series["labels"]:
        return f"⏱️ {title}\n\nЗаписей пока нет: /log", None

    total = sum(series["values"])
    caption = f"⏱️ {title}\nВсего: {total:g} ч"
    chart = generate_bar_chart(series, title)
    if chart is None:
        caption += "\n\n" + series_text(series, "ч")
    return caption, chart


def level_section(user: User, entries: list, photos: list) -> tuple[str, Optional[bytes]]:
    series = level_series(collect_observations(entries, photos), user.starting_level)
    if not series["labels"]:
        return "📈 Уровень\n\nОтметок уровня пока нет: добавь фото или «уровень N» в запись.", None

    caption = f"📈 Уровень: {user.starting_level} → {user.current_level} (цель {user.target_level})"
    chart = generate_level_chart(series)
    if chart is None:
        caption += "\n\n" + series_text(series, "")
    return caption, chart


def methods_section(user: User, entries: list) -> tuple[str, Optional[bytes]]:
    rows = score_methods(entries, user.start_date)
    if not rows:
        return "🧪 Методы\n\nЗаписей с методами пока нет.", None

    caption = "🧪 Сравнение методов\n* оценка примерная, не научная модель"
    table = generate_method_table(rows)
    if table is None:
        lines = [
            f"• {row.method}: {row.days_used} дн., {row.average_hours:.1f} ч, "
            f"комфорт {row.average_comfort:.1f}, оценка {row.effectiveness_score:.2f}"
            for row in rows
        ]
        caption += "\n\n" + "\n".join(lines)
    return caption, table


def journey_section(user: User, entries: list, photos: list) -> str:
    metrics = journey_metrics(user.current_level, user.starting_level, user.target_level, user.start_date)
    milestones = build_milestones(
        collect_observations(entries, photos),
        user.starting_level,
        user.current_level,
        user.target_level,
        user.start_date,
    )

    days_per_level = f"{metrics.days_per_level:.0f}" if metrics.days_per_level else "—"
    if metrics.projected_completion:
        eta = format_date(metrics.projected_completion)
    elif user.current_level >= user.target_level:
        eta = "цель достигнута 🎉"
    else:
        eta = "пока нет оценки"

    text = (
        "🎯 <b>Путь</b>\n\n"
        f"📅 Дней в пути: {metrics.elapsed_days}\n"
        f"📈 Пройдено уровней: {metrics.levels_gained} ({metrics.progress_percent}%)\n"
        f"⚡ Скорость: {metrics.annual_rate:.1f} ур./год, {days_per_level} дн. на уровень\n"
        f"🏁 Прогноз: {eta}"
    )

    if milestones:
        text += "\n\n<b>Вехи:</b>\n"
        for milestone in milestones:
            icon = "🔮" if milestone.is_projected else "✅"
            day = f" (день {milestone.day})" if milestone.day else ""
            text += f"{icon} Уровень {milestone.level}: {format_date(milestone.date)}{day}\n"
    return text


async def stats_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Меню статистики."""
    if not get_profile_user(update, context):
        await update.message.reply_text(NO_PROFILE_TEXT)
        return

    await update.message.reply_text("📊 Выбери раздел статистики:", reply_markup=get_stats_keyboard())


async def stats_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработка callback-кнопок статистики."""
    query = update.callback_query
    await query.answer()

    user = get_profile_user(update, context)
    if not user:
        await query.edit_message_text(NO_PROFILE_TEXT)
        return

    storage = get_storage(context)
    data = query.data

    try:
        entries = storage.list_tracking_entries(user.id)

        if data == "stats:journey":
            photos = storage.list_photos(user.id)
            await query.message.reply_text(journey_section(user, entries, photos), parse_mode="HTML")
            return

        if data == "stats:hours":
            caption, image = hours_section(entries)
        elif data == "stats:weeks":
            caption, image = hours_section(entries, by_week=True)
        elif data == "stats:level":
            caption, image = level_section(user, entries, storage.list_photos(user.id))
        elif data == "stats:methods":
            caption, image = methods_section(user, entries)
        else:
            return
    except Exception as e:
        logger.error(f"Ошибка раздела {data} для user_id={user.id}: {e}", exc_info=True)
        await query.message.reply_text("❌ Не удалось посчитать этот раздел, попробуй позже.")
        return

    if image:
        await query.message.reply_photo(
            photo=InputFile(io.BytesIO(image), filename="chart.png"),
            caption=caption,
        )
    else:
        await query.message.reply_text(caption)


async def admin_users_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Команда для админа: пользователи и число записей."""
    admin_id = get_settings(context).ADMIN_ID
    if admin_id is None or update.effective_user.id != admin_id:
        await update.message.reply_text("❌ Нет доступа.")
        return

    storage = get_storage(context)
    users = storage.list_users()

    text = f"👥 <b>Пользователи ({len(users)})</b>\n\n"
    for user in users:
        entries = storage.list_tracking_entries(user.id)
        text += (
            f"• {user.username}: уровень {user.current_level}/{user.target_level}, "
            f"{len(entries)} зап.\n"
        )

    await update.message.reply_text(text, parse_mode="HTML")


def register_handlers(application: Application) -> None:
    """Регистрация обработчиков."""
    application.add_handler(CommandHandler("stats", stats_command))
    application.add_handler(CommandHandler("admin_users", admin_users_command))
    application.add_handler(CallbackQueryHandler(stats_callback, pattern=r"^stats:"))
