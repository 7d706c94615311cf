"""Общие фикстуры тестов."""
import io
from datetime import date
import pytest
from PIL import Image
from progress_bot.database import create_db_engine, create_session_factory, init_db
from progress_bot.storage import Storage


@pytest.fixture
def storage():
    """Хранилище поверх SQLite в памяти."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield Storage(create_session_factory(engine))
    engine.dispose()


@pytest.fixture
def user(storage):
    """Пользователь с заполненным профилем."""
    return storage.create_user(
        {
            "telegram_id": 1001,
            "username": "tester",
            "name": "Тест",
            "starting_level": 0,
            "current_level": 2,
            "target_level": 8,
            "start_date": date(2024, 1, 1),
            "method": "T-Tape",
            "tension": 500,
        }
    )


@pytest.fixture
def make_image():
    """Фабрика картинок заданного цвета в памяти."""

    def _make(color=(200, 120, 80), image_format="PNG", size=(32, 32)) -> bytes:
        buffer = io.BytesIO()
        Image.new("RGB", size, color).save(buffer, format=image_format)
        return buffer.getvalue()

    return _make
