"""Обработчики ежедневных записей трекинга."""
import calendar
import logging
from datetime import date
from typing import Optional
from telegram import Update
from telegram.ext import Application, CommandHandler, MessageHandler, filters, ContextTypes
from progress_bot.handlers.common import NO_PROFILE_TEXT, get_storage, get_profile_user, format_date
from progress_bot.keyboards.menus import get_entry_keyboard
from progress_bot.models import User, TrackingEntry, REST_DAY
from progress_bot.services.aggregation import weekly_summary, calendar_month
from progress_bot.services.entry_parser import parse_entry_text
from progress_bot.services.methods import TARGET_DAILY_HOURS
from progress_bot.services.projection import (
    CONSISTENCY_GOOD,
    compare_tension,
    consistency_percent,
    day_of_journey,
    elapsed_days,
    optimal_tension,
)
from progress_bot.services.user_service import bump_current_level

logger = logging.getLogger(__name__)

RECENT_ENTRIES = 7
DAY_STATUS_ICONS = {"active": "🟩", "rest": "🟦"}
NO_ENTRY_ICON = "⬜"

TENSION_VERDICTS = {
    "close": "близко к оптимальному",
    "lower": "ниже рекомендуемого",
    "higher": "выше рекомендуемого",
}


def save_entry(context: ContextTypes.DEFAULT_TYPE, user: User, fields: dict) -> tuple[TrackingEntry, bool]:
    """Создать или обновить запись за дату.

    Для новой записи недостающие метод и натяжение берутся из профиля.
    Существующая запись обновляется только переданными полями.
    """
    storage = get_storage(context)
    fields = dict(fields)
    entry_date = fields.pop("date")

    if storage.get_tracking_entry_by_date(user.id, entry_date) is None:
        fields.setdefault("method_used", user.method)
        if fields["method_used"] != REST_DAY:
            fields.setdefault("tension_used", user.tension)
        fields.setdefault("hours_worn", 0)
    fields["day"] = day_of_journey(user.start_date, entry_date)

    entry, created = storage.upsert_tracking_entry(user.id, entry_date, fields)

    if bump_current_level(storage, user, entry.level):
        logger.info(f"User {user.id} reached level {entry.level} on {entry.date}")

    return entry, created


def format_entry(entry: TrackingEntry) -> str:
    """Текст одной записи."""
    if entry.method_used == REST_DAY:
        text = f"😴 {format_date(entry.date)} — день отдыха"
    else:
        text = f"📅 {format_date(entry.date)} — {entry.method_used}, {entry.hours_worn:g} ч"
        if entry.tension_used:
            text += f", {entry.tension_used} г"
    if entry.day:
        text += f" (день {entry.day})"
    if entry.comfort_level:
        text += f"\n   😌 Комфорт: {entry.comfort_level}/5"
    if entry.level is not None:
        text += f"\n   📈 Уровень: {entry.level}"
    if entry.notes:
        text += f"\n   📝 {entry.notes}"
    return text


def generate_progress_bar(current: float, total: float, length: int = 12) -> str:
    """Генерирует визуальный прогресс-бар."""
    if total <= 0:
        return "▯" * length

    filled = int(min(current / total, 1.0) * length)
    empty = length - filled

    return "🟩" * filled + "▯" * empty


async def reply_saved(update: Update, entry: TrackingEntry, created: bool, user: User) -> None:
    header = "✅ Записано" if created else "✏️ Запись обновлена"
    text = f"{header}\n\n{format_entry(entry)}"
    if entry.level is not None and entry.level == user.current_level:
        text += f"\n\n🎉 Текущий уровень: {user.current_level}"
    await update.message.reply_text(text, reply_markup=get_entry_keyboard(entry.id))


async def log_entry(update: Update, context: ContextTypes.DEFAULT_TYPE, text: str) -> None:
    """Разобрать текст и сохранить запись."""
    user = get_profile_user(update, context)
    if not user:
        await update.message.reply_text(NO_PROFILE_TEXT)
        return

    try:
        fields = parse_entry_text(text)
        entry, created = save_entry(context, user, fields)
    except ValueError as e:
        await update.message.reply_text(
            f"❌ {e}\n\nПример: <code>8ч T-Tape комфорт 4</code>", parse_mode="HTML"
        )
        return
    except Exception as e:
        logger.error(f"Ошибка сохранения записи: {e}", exc_info=True)
        await update.message.reply_text("❌ Не удалось сохранить запись, попробуй позже.")
        return

    await reply_saved(update, entry, created, user)


async def log_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Команда /log <запись>."""
    if not context.args:
        await update.message.reply_text(
            "📝 Формат: /log 8ч T-Tape комфорт 4\n"
            "Можно указать дату (2024-01-05, вчера), натяжение (400г), "
            "уровень (уровень 3) и заметку (заметка: ...)"
        )
        return
    await log_entry(update, context, " ".join(context.args))


async def handle_text_entry(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обычный текст как запись за день."""
    user = get_profile_user(update, context)
    if not user:
        return
    if update.message.reply_to_message:
        return

    text = update.message.text.strip()
    if text.startswith("/"):
        return

    await log_entry(update, context, text)


async def rest_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Команда /rest [дата]: отметить день отдыха."""
    text = " ".join(["отдых", *context.args]) if context.args else "отдых"
    await log_entry(update, context, text)


async def entries_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Последние записи, каждая со своей кнопкой удаления."""
    user = get_profile_user(update, context)
    if not user:
        await update.message.reply_text(NO_PROFILE_TEXT)
        return

    entries = get_storage(context).list_tracking_entries(user.id)
    if not entries:
        await update.message.reply_text("📭 Записей пока нет. Добавь первую: /log")
        return

    await update.message.reply_text(f"📋 Последние записи ({min(len(entries), RECENT_ENTRIES)} из {len(entries)}):")
    for entry in entries[:RECENT_ENTRIES]:
        await update.message.reply_text(format_entry(entry), reply_markup=get_entry_keyboard(entry.id))


def recommendations_text(user: User, entries_count: int, today: Optional[date] = None) -> str:
    """Советы: натяжение относительно рекомендуемого и регулярность записей."""
    lines = []

    verdict = compare_tension(user.tension, user.circumference)
    if verdict:
        lines.append(
            f"🎚️ Рекомендуемое натяжение для обхвата {user.circumference}: "
            f"{optimal_tension(user.circumference)} г. "
            f"Твое ({user.tension} г) {TENSION_VERDICTS[verdict]}."
        )

    if entries_count > 0:
        percent = consistency_percent(entries_count, elapsed_days(user.start_date, today))
        if percent >= CONSISTENCY_GOOD:
            advice = "Отлично держишь режим!"
        else:
            advice = "Попробуй записывать чаще, регулярность важна для результата."
        lines.append(f"📆 Записи есть за {percent}% дней пути. {advice}")

    if not lines:
        return ""
    return "💡 <b>Рекомендации</b>\n" + "\n".join(lines)


async def week_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Сводка за текущую неделю."""
    user = get_profile_user(update, context)
    if not user:
        await update.message.reply_text(NO_PROFILE_TEXT)
        return

    entries = get_storage(context).list_tracking_entries(user.id)
    summary = weekly_summary(entries)
    bar = generate_progress_bar(summary["average_hours"], TARGET_DAILY_HOURS)

    comfort = f"{summary['average_comfort']:.1f}/5" if summary["average_comfort"] else "—"
    text = (
        "📅 <b>Эта неделя</b>\n\n"
        f"⏱️ В среднем: {summary['average_hours']:.1f} из {TARGET_DAILY_HOURS} ч в день\n"
        f"{bar}\n"
        f"📆 Дней с записями: {summary['days_tracked']} из 7\n"
        f"😌 Средний комфорт: {comfort}"
    )

    recommendations = recommendations_text(user, len(entries))
    if recommendations:
        text += f"\n\n{recommendations}"
    await update.message.reply_text(text, parse_mode="HTML")


def render_calendar(statuses: dict, year: int, month: int) -> str:
    """Календарь месяца эмодзи, неделя с воскресенья."""
    lines = ["Вс Пн Вт Ср Чт Пт Сб"]
    for week in calendar.Calendar(firstweekday=6).monthdayscalendar(year, month):
        cells = []
        for day in week:
            if day == 0:
                cells.append("  ")
            else:
                cells.append(DAY_STATUS_ICONS.get(statuses.get(date(year, month, day)), NO_ENTRY_ICON))
        lines.append(" ".join(cells))
    return "\n".join(lines)


async def calendar_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Календарь текущего месяца (или /calendar ГГГГ-ММ)."""
    user = get_profile_user(update, context)
    if not user:
        await update.message.reply_text(NO_PROFILE_TEXT)
        return

    today = date.today()
    year, month = today.year, today.month
    if context.args:
        try:
            year, month = (int(part) for part in context.args[0].split("-"))
            date(year, month, 1)
        except ValueError:
            await update.message.reply_text("❌ Формат: /calendar 2024-01")
            return

    statuses = calendar_month(get_storage(context).list_tracking_entries(user.id), year, month)
    active = sum(1 for status in statuses.values() if status == "active")

    await update.message.reply_text(
        f"🗓️ {month:02d}.{year}\n\n"
        f"{render_calendar(statuses, year, month)}\n\n"
        f"🟩 активных дней: {active}  🟦 отдых: {len(statuses) - active}"
    )


def register_handlers(application: Application) -> None:
    """Регистрация обработчиков."""
    application.add_handler(CommandHandler("log", log_command))
    application.add_handler(CommandHandler("rest", rest_command))
    application.add_handler(CommandHandler("entries", entries_command))
    application.add_handler(CommandHandler("week", week_command))
    application.add_handler(CommandHandler("calendar", calendar_command))

    # Текст как запись за день
    text_handler = MessageHandler(
        filters.TEXT & ~filters.COMMAND & ~filters.REPLY, handle_text_entry
    )
    application.add_handler(text_handler)
