"""
Shared dependencies for API routes.
"""
from paperflow.core.service import PdfCompressionService
from paperflow.utils.stats_store import CompressionStatsStore, compression_stats

# One service per process; it holds no per-request state
compression_service = PdfCompressionService()


def get_compression_service() -> PdfCompressionService:
    return compression_service


def get_stats_store() -> CompressionStatsStore:
    return compression_stats
