"""Тесты подбора уровня по сигнатуре."""
import pytest
from progress_bot.services import matching
from progress_bot.services.matching import (
    REFERENCE_SIGNATURES,
    SIGNATURE_SIZE,
    ColorHistogramExtractor,
    FileSizeExtractor,
    euclidean_distance,
    find_closest_level,
    get_extractor,
    match_to_level,
    suggest_level,
)


def test_reference_table_shape():
    assert len(REFERENCE_SIGNATURES) == 11
    assert all(len(signature) == SIGNATURE_SIZE for signature in REFERENCE_SIGNATURES)


def test_exact_reference_matches_its_level():
    for level, signature in enumerate(REFERENCE_SIGNATURES):
        result = find_closest_level(signature)
        assert result.level == level
        assert result.distance == 0


def test_tie_goes_to_lower_level(monkeypatch):
    monkeypatch.setattr(matching, "REFERENCE_SIGNATURES", [[0.0] * 6, [1.0] * 6])

    assert match_to_level([0.5] * 6) == 0


def test_distance():
    assert euclidean_distance([0, 0], [3, 4]) == 5

    with pytest.raises(ValueError):
        euclidean_distance([1, 2, 3], [1, 2])


def test_get_extractor():
    assert isinstance(get_extractor("histogram"), ColorHistogramExtractor)
    assert isinstance(get_extractor("size"), FileSizeExtractor)

    with pytest.raises(ValueError):
        get_extractor("neural")


def test_size_extractor_is_deterministic():
    extractor = FileSizeExtractor()
    first = extractor.extract(b"x" * 1234)

    assert first == extractor.extract(b"y" * 1234)
    assert len(first) == SIGNATURE_SIZE
    assert all(0 <= value <= 1 for value in first)


def test_histogram_extractor(make_image):
    features = ColorHistogramExtractor().extract(make_image(color=(255, 0, 0)))

    assert len(features) == SIGNATURE_SIZE
    assert all(0 <= value <= 1 for value in features)
    red, green, blue, brightness, contrast, saturation = features
    assert red == pytest.approx(1.0)
    assert green == pytest.approx(0.0)
    assert blue == pytest.approx(0.0)
    # Однотонная картинка без контраста
    assert contrast == pytest.approx(0.0)
    assert saturation == pytest.approx(1.0)


def test_histogram_extractor_rejects_garbage():
    with pytest.raises(ValueError):
        ColorHistogramExtractor().extract(b"not an image")


def test_suggest_level(make_image):
    suggestion = suggest_level(make_image(), FileSizeExtractor())

    assert 0 <= suggestion["level"] <= 10
    assert suggestion["distance"] >= 0
    assert len(suggestion["signature"]) == SIGNATURE_SIZE
