"""
Utility functions for the PaperFlow application.
"""
from paperflow.utils.metrics import (
    get_cpu_mem,
    round_half_up,
    compression_ratio,
    precise_compression_ratio,
    get_compression_stats,
    log_compression_result,
    PerformanceTimer
)

from paperflow.utils.file_handling import (
    UploadTooLargeError,
    get_upload_filepath,
    cleanup_file,
    temp_file_context,
    save_upload
)

from paperflow.utils.stats_store import (
    CompressionStatsStore,
    compression_stats
)

__all__ = [
    # Metrics utilities
    'get_cpu_mem',
    'round_half_up',
    'compression_ratio',
    'precise_compression_ratio',
    'get_compression_stats',
    'log_compression_result',
    'PerformanceTimer',

    # File handling utilities
    'UploadTooLargeError',
    'get_upload_filepath',
    'cleanup_file',
    'temp_file_context',
    'save_upload',

    # Stats store
    'CompressionStatsStore',
    'compression_stats'
]
