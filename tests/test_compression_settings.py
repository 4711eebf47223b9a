import pytest

from paperflow.core.compression_settings import (
    LEVEL_BASELINES,
    MIN_DOWNSAMPLE_DPI,
    MIN_IMAGE_QUALITY,
    calculate_settings
)
from paperflow.models.compression import CompressionLevel

MB = 1024 * 1024


@pytest.mark.parametrize("level, quality, dpi, dedup", [
    (CompressionLevel.NONE, 100, 300, False),
    (CompressionLevel.LOW, 85, 200, True),
    (CompressionLevel.MEDIUM, 75, 150, True),
    (CompressionLevel.HIGH, 60, 100, True),
    (CompressionLevel.MAXIMUM, 40, 72, True),
])
def test_baseline_table(level, quality, dpi, dedup):
    settings = calculate_settings(1 * MB, 10, level)
    assert settings.image_quality == quality
    assert settings.downsample_dpi == dpi
    assert settings.deduplicate_resources is dedup
    assert settings.objects_per_tick == 100
    assert settings.use_object_streams is True


@pytest.mark.parametrize("level", list(CompressionLevel))
def test_large_files_get_stricter_settings(level):
    base_quality, base_dpi, _ = LEVEL_BASELINES[level]
    settings = calculate_settings(10 * MB + 1, 10, level)
    assert settings.image_quality < base_quality
    assert settings.downsample_dpi < base_dpi
    assert settings.image_quality == base_quality - 5
    assert settings.downsample_dpi == max(MIN_DOWNSAMPLE_DPI, base_dpi - 25)


def test_exactly_ten_megabytes_is_not_large():
    settings = calculate_settings(10 * MB, 10, CompressionLevel.MEDIUM)
    assert settings.image_quality == 75
    assert settings.downsample_dpi == 150


@pytest.mark.parametrize("pages, expected", [(1, 100), (50, 100), (51, 200), (500, 200)])
def test_objects_per_tick(pages, expected):
    assert calculate_settings(MB, pages, CompressionLevel.HIGH).objects_per_tick == expected


def test_settings_are_deterministic():
    for level in CompressionLevel:
        for size in (0, 3 * MB, 11 * MB):
            assert calculate_settings(size, 60, level) == calculate_settings(size, 60, level)


def test_settings_never_drop_below_floors():
    for level in CompressionLevel:
        settings = calculate_settings(500 * MB, 1000, level)
        assert settings.image_quality >= MIN_IMAGE_QUALITY
        assert settings.downsample_dpi >= MIN_DOWNSAMPLE_DPI
    assert calculate_settings(500 * MB, 1, CompressionLevel.MAXIMUM).downsample_dpi == 47
