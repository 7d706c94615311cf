"""Подбор уровня по фото через сравнение сигнатур.

ВНИМАНИЕ: эталонные сигнатуры — демонстрационные данные, а не результат
анализа реальных эталонных фото. Подсказка уровня всегда показывается
пользователю на подтверждение и не используется без него.
"""
import io
import logging
import math
from typing import NamedTuple, Protocol, Sequence, TypedDict
from PIL import Image, ImageStat

logger = logging.getLogger(__name__)

SIGNATURE_SIZE = 6

# Демо-сигнатуры для уровней 0-10
REFERENCE_SIGNATURES: list[list[float]] = [
    [0.2, 0.3, 0.5, 0.7, 0.2, 0.1],
    [0.3, 0.4, 0.6, 0.6, 0.3, 0.2],
    [0.4, 0.5, 0.5, 0.5, 0.4, 0.3],
    [0.5, 0.6, 0.4, 0.4, 0.5, 0.4],
    [0.6, 0.5, 0.3, 0.3, 0.6, 0.5],
    [0.7, 0.4, 0.4, 0.2, 0.7, 0.6],
    [0.8, 0.3, 0.5, 0.3, 0.8, 0.7],
    [0.7, 0.2, 0.6, 0.4, 0.7, 0.8],
    [0.6, 0.3, 0.7, 0.5, 0.6, 0.9],
    [0.5, 0.4, 0.8, 0.6, 0.5, 1.0],
    [0.4, 0.5, 0.9, 0.7, 0.4, 0.8],
]


class MatchResult(NamedTuple):
    """Ближайший эталон."""

    level: int
    distance: float


class LevelSuggestion(TypedDict):
    """Подсказка уровня при загрузке фото."""

    level: int
    distance: float
    signature: list[float]


class FeatureExtractor(Protocol):
    """Превращает байты изображения в вектор признаков длины SIGNATURE_SIZE."""

    name: str

    def extract(self, image_bytes: bytes) -> list[float]:
        ...


class FileSizeExtractor:
    """ЗАГЛУШКА: псевдо-сигнатура из размера файла (синус от size % 100).

    Изображение не анализируется. Оставлена для демо и воспроизводимости.
    """

    name = "size"

    def extract(self, image_bytes: bytes) -> list[float]:
        base = math.sin(len(image_bytes) % 100) * 0.5 + 0.5
        return [
            0.3 + base * 0.5,
            0.4 + (1 - base) * 0.4,
            0.5 + base * 0.3,
            0.6 + (1 - base) * 0.2,
            0.7 + base * 0.2,
            0.8 + (1 - base) * 0.1,
        ]


class ColorHistogramExtractor:
    """Признаки по содержимому изображения (Pillow).

    Все значения в [0, 1]: средние R, G, B, яркость, контраст, насыщенность.
    """

    name = "histogram"

    # Уменьшаем до миниатюры: признаки глобальные, размер не важен
    thumbnail_size = (128, 128)

    def extract(self, image_bytes: bytes) -> list[float]:
        try:
            with Image.open(io.BytesIO(image_bytes)) as img:
                img = img.convert("RGB")
                img.thumbnail(self.thumbnail_size)

                rgb = ImageStat.Stat(img)
                gray = ImageStat.Stat(img.convert("L"))
                hsv = ImageStat.Stat(img.convert("HSV"))
        except OSError as e:
            raise ValueError(f"Не удалось прочитать изображение: {e}") from e

        red, green, blue = (value / 255 for value in rgb.mean)
        brightness = gray.mean[0] / 255
        # Максимально возможное stddev для 0..255 равно 127.5
        contrast = min(1.0, gray.stddev[0] / 127.5)
        saturation = hsv.mean[1] / 255

        return [red, green, blue, brightness, contrast, saturation]


EXTRACTORS = {
    FileSizeExtractor.name: FileSizeExtractor,
    ColorHistogramExtractor.name: ColorHistogramExtractor,
}


def get_extractor(name: str) -> FeatureExtractor:
    """Экстрактор по имени из конфигурации ("histogram" или "size")."""
    try:
        return EXTRACTORS[name]()
    except KeyError:
        raise ValueError(f"Неизвестный экстрактор признаков: {name!r}") from None


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Евклидово расстояние: чем меньше, тем похожее."""
    if len(a) != len(b):
        raise ValueError("Сигнатуры должны быть одной размерности")
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)))


def find_closest_level(signature: Sequence[float]) -> MatchResult:
    """Ближайший эталон. При равенстве выигрывает меньший уровень."""
    best_level = 0
    best_distance = math.inf

    for level, reference in enumerate(REFERENCE_SIGNATURES):
        distance = euclidean_distance(signature, reference)
        if distance < best_distance:
            best_distance = distance
            best_level = level

    return MatchResult(best_level, best_distance)


def match_to_level(signature: Sequence[float]) -> int:
    """Уровень 0-10, ближайший к сигнатуре."""
    return find_closest_level(signature).level


def suggest_level(image_bytes: bytes, extractor: FeatureExtractor) -> LevelSuggestion:
    """Предложить уровень для загруженного фото."""
    signature = extractor.extract(image_bytes)
    match = find_closest_level(signature)
    logger.info(
        f"Suggested level {match.level} (distance {match.distance:.3f}) via {extractor.name}"
    )
    return {"level": match.level, "distance": match.distance, "signature": signature}
