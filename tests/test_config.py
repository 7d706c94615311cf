"""Тесты конфигурации."""
import pytest
from progress_bot.config import Config


def test_config_validation():
    """Тест валидации конфигурации."""
    config = Config(BOT_TOKEN="test_token", DATABASE_URL="sqlite:///test.db", ADMIN_ID=None)
    # Не должно вызывать ошибку
    config.validate()


@pytest.mark.parametrize(
    "overrides",
    [
        {"BOT_TOKEN": ""},
        {"SIGNATURE_EXTRACTOR": "neural"},
        {"MAX_PHOTO_BYTES": 0},
    ],
)
def test_invalid_config(overrides):
    config = Config(**{"BOT_TOKEN": "test_token", **overrides})

    with pytest.raises(ValueError):
        config.validate()


def test_from_env(monkeypatch):
    monkeypatch.setenv("BOT_TOKEN", "env_token")
    monkeypatch.setenv("ADMIN_ID", "42")
    monkeypatch.setenv("SEED_DEMO_USER", "yes")
    monkeypatch.setenv("SIGNATURE_EXTRACTOR", "size")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.delenv("UPLOADS_DIR", raising=False)

    config = Config.from_env()

    assert config.BOT_TOKEN == "env_token"
    assert config.ADMIN_ID == 42
    assert config.SEED_DEMO_USER is True
    assert config.SIGNATURE_EXTRACTOR == "size"
    assert config.LOG_LEVEL == "DEBUG"
    assert config.UPLOADS_DIR == "uploads"
