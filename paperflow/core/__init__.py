"""
Core PDF compression implementations.

This package contains:
- Settings derivation from file size, page count and level
- Heuristic compression analysis
- The Ghostscript adapter
- The pikepdf fallback compressor
- The compression service that chooses between them
"""
from paperflow.core.exceptions import (
    PdfProcessingError,
    SourceNotFoundError,
    SourceUnreadableError,
    GhostscriptUnavailableError,
    GhostscriptError,
    CompressionError
)

from paperflow.core.compression_settings import calculate_settings

from paperflow.core.analyzer import (
    analyze_for_compression,
    enrich_analysis
)

from paperflow.core.ghostscript import (
    GhostscriptCompressor,
    is_ghostscript_available,
    compress_with_ghostscript
)

from paperflow.core.basic import (
    BasicCompressionResult,
    apply_basic_compression,
    save_compressed
)

from paperflow.core.service import PdfCompressionService

__all__ = [
    # Errors
    'PdfProcessingError',
    'SourceNotFoundError',
    'SourceUnreadableError',
    'GhostscriptUnavailableError',
    'GhostscriptError',
    'CompressionError',

    # Settings and analysis
    'calculate_settings',
    'analyze_for_compression',
    'enrich_analysis',

    # Strategies
    'GhostscriptCompressor',
    'is_ghostscript_available',
    'compress_with_ghostscript',
    'BasicCompressionResult',
    'apply_basic_compression',
    'save_compressed',

    # Service
    'PdfCompressionService'
]
