"""Точка входа для Progress Bot."""
import logging
from telegram.ext import Application
from progress_bot.config import config
from progress_bot.database import create_db_engine, create_session_factory, init_db
from progress_bot.handlers import (
    register_start_handlers,
    register_profile_handlers,
    register_photo_handlers,
    register_stats_handlers,
    register_callback_handlers,
    register_tracking_handlers,
)
from progress_bot.services.matching import get_extractor
from progress_bot.storage import Storage

# Настройка логирования
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Запуск бота."""
    # Проверка конфигурации
    try:
        config.validate()
    except ValueError as e:
        logger.error(f"Ошибка конфигурации: {e}")
        return

    # Инициализация БД
    logger.info("Инициализация базы данных...")
    engine = create_db_engine(config.DATABASE_URL)
    init_db(engine)
    storage = Storage(create_session_factory(engine))

    if config.SEED_DEMO_USER:
        storage.seed_demo_user()

    # Создание приложения
    logger.info("Запуск бота...")
    application = Application.builder().token(config.BOT_TOKEN).build()

    application.bot_data["storage"] = storage
    application.bot_data["config"] = config
    application.bot_data["extractor"] = get_extractor(config.SIGNATURE_EXTRACTOR)
    logger.info(f"Экстрактор признаков фото: {config.SIGNATURE_EXTRACTOR}")

    # Регистрация обработчиков; текст как запись за день идет последним
    register_start_handlers(application)
    register_profile_handlers(application)
    register_photo_handlers(application)
    register_stats_handlers(application)
    register_callback_handlers(application)
    register_tracking_handlers(application)

    application.run_polling(allowed_updates=["message", "callback_query"])


if __name__ == "__main__":
    main()
