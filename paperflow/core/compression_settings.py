"""
Derivation of compression parameters from document characteristics.
"""
from paperflow.models.compression import CompressionLevel, CompressionSettings

LARGE_FILE_THRESHOLD = 10 * 1024 * 1024
LARGE_FILE_QUALITY_PENALTY = 5
LARGE_FILE_DPI_PENALTY = 25
MANY_PAGES_THRESHOLD = 50

MIN_IMAGE_QUALITY = 1
MIN_DOWNSAMPLE_DPI = 36

# level -> (image_quality, downsample_dpi, deduplicate_resources)
LEVEL_BASELINES = {
    CompressionLevel.NONE: (100, 300, False),
    CompressionLevel.LOW: (85, 200, True),
    CompressionLevel.MEDIUM: (75, 150, True),
    CompressionLevel.HIGH: (60, 100, True),
    CompressionLevel.MAXIMUM: (40, 72, True),
}


def calculate_settings(
    file_size_bytes: int,
    page_count: int,
    level: CompressionLevel
) -> CompressionSettings:
    """
    Calculate compression settings for a document.

    Args:
        file_size_bytes: Size of the source file in bytes
        page_count: Number of pages in the source document
        level: Requested compression level

    Returns:
        Derived compression settings
    """
    image_quality, downsample_dpi, deduplicate = LEVEL_BASELINES[level]

    # Larger files get more aggressive settings
    if file_size_bytes > LARGE_FILE_THRESHOLD:
        image_quality = max(MIN_IMAGE_QUALITY, image_quality - LARGE_FILE_QUALITY_PENALTY)
        downsample_dpi = max(MIN_DOWNSAMPLE_DPI, downsample_dpi - LARGE_FILE_DPI_PENALTY)

    objects_per_tick = 200 if page_count > MANY_PAGES_THRESHOLD else 100

    return CompressionSettings(
        image_quality=image_quality,
        downsample_dpi=downsample_dpi,
        objects_per_tick=objects_per_tick,
        deduplicate_resources=deduplicate
    )
