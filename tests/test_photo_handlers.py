"""Тесты обработчиков фото: ожидающее фото, фильтр и сортировка."""
import asyncio
from datetime import date
from types import SimpleNamespace
import pytest
from progress_bot.config import Config
from progress_bot.handlers.photos import (
    PENDING_KEY,
    parse_photos_args,
    pending_token,
    photo_caption,
    photo_level_callback,
    select_photos,
    take_pending,
)
from progress_bot.keyboards.menus import get_photo_confirm_keyboard
from progress_bot.services.photo_service import save_upload


class FakeQuery:
    """callback_query с записью отредактированного текста."""

    def __init__(self, data: str):
        self.data = data
        self.text = None

    async def answer(self):
        pass

    async def edit_message_text(self, text, reply_markup=None, **kwargs):
        self.text = text


@pytest.fixture
def uploads_dir(tmp_path):
    return str(tmp_path)


@pytest.fixture
def context(storage, uploads_dir):
    return SimpleNamespace(
        bot_data={"storage": storage, "config": Config(BOT_TOKEN="test", UPLOADS_DIR=uploads_dir)},
        user_data={},
    )


def make_pending(context, make_image, uploads_dir) -> str:
    """Сохранить файл и положить его как ожидающее фото."""
    filename = save_upload(make_image(), uploads_dir)
    context.user_data[PENDING_KEY] = {
        "filename": filename,
        "date": date(2024, 1, 10),
        "notes": None,
        "suggested_level": 3,
    }
    return filename


def press(context, telegram_id: int, data: str) -> FakeQuery:
    query = FakeQuery(data)
    update = SimpleNamespace(callback_query=query, effective_user=SimpleNamespace(id=telegram_id))
    asyncio.run(photo_level_callback(update, context))
    return query


def test_take_pending_checks_token():
    user_data = {PENDING_KEY: {"filename": "123-456.png"}}

    assert take_pending(user_data, "999-000") is None
    assert PENDING_KEY in user_data

    assert take_pending(user_data, "123-456") == {"filename": "123-456.png"}
    assert PENDING_KEY not in user_data


def test_confirm_keyboard_carries_token():
    keyboard = get_photo_confirm_keyboard(pending_token("123-456.png"), 3)
    data = [button.callback_data for row in keyboard.inline_keyboard for button in row]

    assert "photo_level:123-456:3" in data
    assert data[-1] == "photo_cancel:123-456"
    assert all(len(item.encode()) <= 64 for item in data)


def test_stale_keyboard_does_not_save_newer_photo(storage, user, context, make_image, uploads_dir):
    """Кнопка под замененным фото не сохраняет новое и не меняет уровень."""
    newer = make_pending(context, make_image, uploads_dir)

    query = press(context, user.telegram_id, "photo_level:111-222:9")

    assert "заменено" in query.text
    assert context.user_data[PENDING_KEY]["filename"] == newer
    assert storage.list_photos(user.id) == []
    assert storage.get_user(user.id).current_level == 2


def test_confirm_saves_photo_and_raises_level(storage, user, context, make_image, uploads_dir):
    filename = make_pending(context, make_image, uploads_dir)

    press(context, user.telegram_id, f"photo_level:{pending_token(filename)}:4")

    photos = storage.list_photos(user.id)
    assert [(p.filename, p.level, p.suggested_level, p.day) for p in photos] == [(filename, 4, 3, 10)]
    assert storage.get_user(user.id).current_level == 4
    assert PENDING_KEY not in context.user_data


def test_cancel_deletes_file(context, user, make_image, uploads_dir, tmp_path):
    filename = make_pending(context, make_image, uploads_dir)

    press(context, user.telegram_id, f"photo_cancel:{pending_token(filename)}")

    assert not (tmp_path / filename).exists()
    assert PENDING_KEY not in context.user_data


def test_confirm_without_profile_removes_file(storage, user, context, make_image, uploads_dir, tmp_path):
    """Профиль удалили до подтверждения: файл не остается на диске."""
    filename = make_pending(context, make_image, uploads_dir)
    storage.delete_user(user.id)

    press(context, user.telegram_id, f"photo_level:{pending_token(filename)}:4")

    assert not (tmp_path / filename).exists()
    assert PENDING_KEY not in context.user_data


def test_parse_photos_args():
    assert parse_photos_args([]) == (None, "newest")
    assert parse_photos_args(["уровень", "3"]) == (3, "newest")
    assert parse_photos_args(["Старые"]) == (None, "oldest")
    assert parse_photos_args(["уровень"]) == (None, "level")
    assert parse_photos_args(["уровень", "5", "старые"]) == (5, "oldest")

    with pytest.raises(ValueError):
        parse_photos_args(["уровень", "11"])
    with pytest.raises(ValueError):
        parse_photos_args(["вчера"])


def test_select_photos(storage, user):
    for day, level in ((1, 2), (5, 4), (3, 2), (4, None)):
        storage.create_photo(
            {"user_id": user.id, "date": date(2024, 1, day), "filename": f"{day}.jpg", "level": level}
        )
    photos = storage.list_photos(user.id)

    assert [p.date.day for p in select_photos(photos)] == [5, 4, 3, 1]
    assert [p.date.day for p in select_photos(photos, order="oldest")] == [1, 3, 4, 5]
    assert [p.date.day for p in select_photos(photos, level=2)] == [3, 1]
    # По уровню, при равном уровне новые выше
    assert [p.date.day for p in select_photos(photos, order="level")] == [5, 3, 1, 4]


def test_reference_caption_has_description(storage, user):
    reference = storage.create_photo(
        {"user_id": user.id, "date": "2024-01-01", "filename": "r.jpg", "level": 5, "is_reference": True}
    )
    own = storage.create_photo({"user_id": user.id, "date": "2024-01-01", "filename": "o.jpg", "level": 5})

    assert "📖" in photo_caption(reference)
    assert "📖" not in photo_caption(own)
