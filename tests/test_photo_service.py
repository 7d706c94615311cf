"""Тесты сохранения фото."""
import pytest
from progress_bot.services.photo_service import (
    delete_upload,
    detect_image_extension,
    save_upload,
    upload_path,
)


def test_detect_image_extension(make_image):
    assert detect_image_extension(make_image(image_format="PNG")) == ".png"
    assert detect_image_extension(make_image(image_format="JPEG")) == ".jpg"
    assert detect_image_extension(make_image(image_format="GIF")) == ".gif"


def test_rejects_non_images(make_image):
    with pytest.raises(ValueError):
        detect_image_extension(b"%PDF-1.4 not an image")
    with pytest.raises(ValueError):
        detect_image_extension(make_image(image_format="BMP"))


def test_save_and_delete(tmp_path, make_image):
    data = make_image()
    filename = save_upload(data, str(tmp_path / "uploads"))

    assert filename.endswith(".png")
    path = upload_path(filename, str(tmp_path / "uploads"))
    assert path.read_bytes() == data

    assert delete_upload(filename, str(tmp_path / "uploads"))
    assert not path.exists()
    # Повторное удаление
    assert not delete_upload(filename, str(tmp_path / "uploads"))


def test_unique_filenames(tmp_path, make_image):
    data = make_image()
    names = {save_upload(data, str(tmp_path)) for _ in range(5)}

    assert len(names) == 5


def test_size_limit(tmp_path, make_image):
    with pytest.raises(ValueError):
        save_upload(make_image(size=(64, 64)), str(tmp_path), max_bytes=10)
    assert list(tmp_path.iterdir()) == []


def test_upload_path_rejects_directories(tmp_path):
    with pytest.raises(ValueError):
        upload_path("../secret.png", str(tmp_path))
    with pytest.raises(ValueError):
        upload_path("sub/photo.png", str(tmp_path))
