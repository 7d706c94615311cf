"""Сохранение загруженных фото на диск."""
import io
import logging
import random
import time
from pathlib import Path
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Формат Pillow -> расширение файла
ALLOWED_FORMATS = {"JPEG": ".jpg", "PNG": ".png", "GIF": ".gif"}
MAX_PHOTO_BYTES = 5 * 1024 * 1024


def detect_image_extension(data: bytes) -> str:
    """Проверить, что это JPEG/PNG/GIF, и вернуть расширение.

    Raises:
        ValueError: не изображение или неподдерживаемый формат
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValueError("Разрешены только изображения (jpeg, png, gif)") from e

    if image_format not in ALLOWED_FORMATS:
        raise ValueError("Разрешены только изображения (jpeg, png, gif)")
    return ALLOWED_FORMATS[image_format]


def unique_filename(extension: str) -> str:
    """Имя вида <миллисекунды>-<случайное число><расширение>."""
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{extension}"


def save_upload(data: bytes, uploads_dir: str, max_bytes: int = MAX_PHOTO_BYTES) -> str:
    """Проверить и сохранить фото.

    Returns:
        Имя сохранённого файла (без каталога)

    Raises:
        ValueError: файл слишком большой или не является изображением
    """
    if len(data) > max_bytes:
        raise ValueError(f"Фото больше {max_bytes // (1024 * 1024)} МБ")

    extension = detect_image_extension(data)

    directory = Path(uploads_dir)
    directory.mkdir(parents=True, exist_ok=True)

    filename = unique_filename(extension)
    (directory / filename).write_bytes(data)
    logger.info(f"Saved upload {filename} ({len(data)} bytes)")
    return filename


def upload_path(filename: str, uploads_dir: str) -> Path:
    """Путь к файлу; имена с каталогами отклоняются."""
    if Path(filename).name != filename:
        raise ValueError(f"Некорректное имя файла: {filename!r}")
    return Path(uploads_dir) / filename


def delete_upload(filename: str, uploads_dir: str) -> bool:
    """Удалить файл фото. False, если файла уже нет."""
    path = upload_path(filename, uploads_dir)
    if not path.exists():
        return False
    path.unlink()
    logger.info(f"Deleted upload {filename}")
    return True
