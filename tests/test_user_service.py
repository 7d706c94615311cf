"""Тесты сервиса пользователей."""
from telegram import User as TelegramUser
from progress_bot.services.user_service import bump_current_level, get_or_create_user, has_profile


def test_get_or_create_user(storage):
    tg_user = TelegramUser(id=555, first_name="Иван", is_bot=False, username="ivan")

    created = get_or_create_user(storage, tg_user)
    again = get_or_create_user(storage, tg_user)

    assert created.id == again.id
    assert created.username == "ivan"
    assert created.name == "Иван"
    assert not has_profile(created)


def test_username_fallback(storage):
    """Без username или при занятом нике используется tg<id>."""
    storage.create_user({"username": "taken"})

    no_username = get_or_create_user(storage, TelegramUser(id=1, first_name="A", is_bot=False))
    clash = get_or_create_user(storage, TelegramUser(id=2, first_name="B", is_bot=False, username="taken"))

    assert no_username.username == "tg1"
    assert clash.username == "tg2"


def test_has_profile(user):
    assert has_profile(user)
    assert not has_profile(None)


def test_bump_current_level(storage, user):
    # Ниже или равен текущему: без изменений
    assert not bump_current_level(storage, user, 1)
    assert not bump_current_level(storage, user, None)

    assert bump_current_level(storage, user, 4)
    assert user.current_level == 4
    assert storage.get_user(user.id).current_level == 4
