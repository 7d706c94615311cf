"""Конфигурация бота из переменных окружения."""
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

# Допустимые экстракторы признаков фото (см. services/matching.py)
SIGNATURE_EXTRACTORS = ("histogram", "size")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Config:
    """Настройки бота."""

    BOT_TOKEN: str
    DATABASE_URL: str = "sqlite:///progress_bot.db"
    ADMIN_ID: int | None = None
    # Каталог для загруженных фото
    UPLOADS_DIR: str = "uploads"
    MAX_PHOTO_BYTES: int = 5 * 1024 * 1024
    SIGNATURE_EXTRACTOR: str = "histogram"
    SEED_DEMO_USER: bool = False
    LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Загрузка конфигурации из окружения."""
        return cls(
            BOT_TOKEN=os.getenv("BOT_TOKEN", ""),
            DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///progress_bot.db"),
            ADMIN_ID=int(os.getenv("ADMIN_ID")) if os.getenv("ADMIN_ID") else None,
            UPLOADS_DIR=os.getenv("UPLOADS_DIR", "uploads"),
            MAX_PHOTO_BYTES=int(os.getenv("MAX_PHOTO_BYTES", str(5 * 1024 * 1024))),
            SIGNATURE_EXTRACTOR=os.getenv("SIGNATURE_EXTRACTOR", "histogram"),
            SEED_DEMO_USER=_env_bool("SEED_DEMO_USER", False),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> None:
        """Проверка обязательных настроек."""
        if not self.BOT_TOKEN:
            raise ValueError("BOT_TOKEN не установлен в .env")
        if self.SIGNATURE_EXTRACTOR not in SIGNATURE_EXTRACTORS:
            raise ValueError(
                f"SIGNATURE_EXTRACTOR должен быть одним из {SIGNATURE_EXTRACTORS}, "
                f"получено: {self.SIGNATURE_EXTRACTOR!r}"
            )
        if self.MAX_PHOTO_BYTES <= 0:
            raise ValueError("MAX_PHOTO_BYTES должен быть положительным")


# Глобальный экземпляр конфигурации (используется только точкой входа)
config = Config.from_env()
