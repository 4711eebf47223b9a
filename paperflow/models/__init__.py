"""
Data models for the PaperFlow API.

This module provides Pydantic models for request/response validation and
documentation of the compression endpoints.
"""
from paperflow.models.base import (
    BaseMetrics,
    BaseSizeComparison
)

from paperflow.models.compression import (
    CompressionLevel,
    CompressionOptions,
    CompressionSettings,
    CompressionAnalysis,
    CompressionStats,
    CompressionResponse,
    AnalysisResponse,
    CompressionStatsRecord
)

__all__ = [
    # Base models
    'BaseMetrics',
    'BaseSizeComparison',

    # Compression models
    'CompressionLevel',
    'CompressionOptions',
    'CompressionSettings',
    'CompressionAnalysis',
    'CompressionStats',
    'CompressionResponse',
    'AnalysisResponse',
    'CompressionStatsRecord'
]
