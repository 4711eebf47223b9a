"""
Heuristic compression analysis of PDF files.

The analysis only looks at file size, page count and document metadata;
it never compresses anything.
"""
import logging

from paperflow.core.documents import get_source_size, open_source_pdf, has_document_metadata
from paperflow.models.compression import CompressionAnalysis
from paperflow.utils.metrics import round_half_up

logger = logging.getLogger(__name__)

KB = 1024
MB = 1024 * 1024

MAX_POTENTIAL_SAVINGS = 95

# Pages above this average size are assumed to carry images
IMAGE_PAGE_THRESHOLD = 100 * KB
IMAGE_SHARE_OF_FILE = 0.7

RECOMMEND_HIGH = "Use high compression level for significant size reduction"
RECOMMEND_MEDIUM = "Use medium compression level for good balance of quality and size"
RECOMMEND_LOW = "Use low compression level to maintain high quality"
RECOMMEND_DOWNSAMPLE = "Consider downsampling images to 150 DPI for web viewing"
RECOMMEND_DEDUPLICATE = "Enable resource deduplication to eliminate redundant content"


def build_analysis(file_size: int, page_count: int) -> CompressionAnalysis:
    """
    Apply the recommendation rules to a file size and page count.

    Args:
        file_size: Size of the file in bytes
        page_count: Number of pages (must be positive)

    Returns:
        Analysis with recommendations and potential savings
    """
    avg_page_size = file_size / page_count
    recommendations = []
    savings = 0

    if avg_page_size > 500 * KB:
        recommendations.append(RECOMMEND_HIGH)
        savings += 30
    elif avg_page_size > 200 * KB:
        recommendations.append(RECOMMEND_MEDIUM)
        savings += 20
    elif avg_page_size > 100 * KB:
        recommendations.append(RECOMMEND_LOW)
        savings += 10

    if file_size > 5 * MB and page_count > 20:
        recommendations.append(RECOMMEND_DOWNSAMPLE)
        savings += 15

    if file_size > 2 * MB:
        recommendations.append(RECOMMEND_DEDUPLICATE)
        savings += 5

    # Round to the nearest 5%
    potential_savings = min(MAX_POTENTIAL_SAVINGS, round_half_up(savings / 5) * 5)

    return CompressionAnalysis(
        file_size_bytes=file_size,
        file_size_kb=round_half_up(file_size / KB),
        page_count=page_count,
        avg_page_size_kb=round_half_up(avg_page_size / KB),
        potential_savings=potential_savings,
        recommendations=recommendations
    )


def analyze_for_compression(file_path: str) -> CompressionAnalysis:
    """
    Analyze a PDF file to identify compression opportunities.

    Args:
        file_path: Path to the PDF file

    Returns:
        Analysis results including recommendations

    Raises:
        SourceNotFoundError: If the file does not exist
        SourceUnreadableError: If the file cannot be parsed as a PDF
    """
    file_size = get_source_size(file_path)
    with open_source_pdf(file_path) as pdf:
        page_count = len(pdf.pages)

    analysis = build_analysis(file_size, page_count)
    logger.debug(
        f"Analyzed {file_path}: {analysis.file_size_kb} KB, {page_count} pages, "
        f"potential savings {analysis.potential_savings}%"
    )
    return analysis


def enrich_analysis(analysis: CompressionAnalysis, file_path: str) -> CompressionAnalysis:
    """
    Add image, metadata and form field hints to an analysis.

    Image presence is approximated from the average page size; form fields
    are never detected.
    """
    has_images = analysis.file_size_bytes / analysis.page_count > IMAGE_PAGE_THRESHOLD

    with open_source_pdf(file_path) as pdf:
        has_metadata = has_document_metadata(pdf)

    return analysis.model_copy(update={
        "has_images": has_images,
        "estimated_image_size_bytes": (
            round_half_up(analysis.file_size_bytes * IMAGE_SHARE_OF_FILE) if has_images else None
        ),
        "has_metadata": has_metadata,
        "has_form_fields": False,
    })
