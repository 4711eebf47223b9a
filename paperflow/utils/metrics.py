"""
Utilities for measuring compression results and resource usage.
"""
import os
import math
import time
import logging
from typing import Dict

import psutil

from paperflow.models.compression import CompressionStats

# Set up logging
logger = logging.getLogger(__name__)


def get_cpu_mem() -> Dict[str, float]:
    """
    Get current CPU and memory usage.

    Returns:
        Dictionary with CPU and memory usage percentages
    """
    return {
        "cpu_usage": psutil.cpu_percent(interval=None),
        "memory_usage": psutil.virtual_memory().percent
    }


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding towards positive infinity."""
    return int(math.floor(value + 0.5))


def compression_ratio(original_size: int, compressed_size: int) -> int:
    """
    Percentage of space saved, rounded to an integer.

    Negative when the compressed file is larger than the original.
    """
    if original_size <= 0:
        return 0
    return round_half_up((1 - compressed_size / original_size) * 100)


def precise_compression_ratio(original_size: int, compressed_size: int) -> float:
    """Percentage of space saved with one decimal place."""
    if original_size <= 0:
        return 0.0
    return round((1 - compressed_size / original_size) * 100, 1)


def get_compression_stats(original_path: str, compressed_path: str) -> CompressionStats:
    """
    Compare an original and a compressed PDF on disk.

    Args:
        original_path: Path to the original PDF
        compressed_path: Path to the compressed PDF

    Returns:
        Size comparison between the two files
    """
    original_size = os.path.getsize(original_path)
    compressed_size = os.path.getsize(compressed_path)
    size_reduction = original_size - compressed_size

    return CompressionStats(
        original_size=original_size,
        original_size_kb=round_half_up(original_size / 1024),
        compressed_size=compressed_size,
        compressed_size_kb=round_half_up(compressed_size / 1024),
        size_reduction=size_reduction,
        size_reduction_kb=round_half_up(size_reduction / 1024),
        compression_ratio=compression_ratio(original_size, compressed_size),
        precise_ratio=precise_compression_ratio(original_size, compressed_size)
    )


def log_compression_result(label: str, original_size: int, compressed_size: int) -> None:
    """Log a compression summary for one strategy."""
    logger.info(
        f"{label} compression: {original_size} bytes ({round_half_up(original_size / 1024)} KB) -> "
        f"{compressed_size} bytes ({round_half_up(compressed_size / 1024)} KB), "
        f"ratio {compression_ratio(original_size, compressed_size)}%"
    )


class PerformanceTimer:
    """
    Context manager for measuring execution time.

    Example:
        with PerformanceTimer() as timer:
            # Code to measure
        execution_time = timer.execution_time
    """

    def __init__(self):
        self.start_time = None
        self.execution_time = 0

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.execution_time = time.time() - self.start_time
        return False  # Don't suppress exceptions
