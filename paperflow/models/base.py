"""
Base models for the PaperFlow API.
These models define common fields for reuse across responses.
"""
from pydantic import BaseModel, Field


class BaseMetrics(BaseModel):
    """Base class for performance and resource metrics"""
    cpu_usage: float = Field(..., description="CPU usage during operation (%)")
    memory_usage: float = Field(..., description="Memory usage during operation (%)")


class BaseSizeComparison(BaseModel):
    """Base class for responses comparing an original and a processed file"""
    original_size: int = Field(..., description="Size of the original file in bytes")
    compressed_size: int = Field(..., description="Size of the compressed file in bytes")
    compression_ratio: float = Field(
        ..., description="Percentage of space saved (1 - compressed/original) * 100"
    )
