"""
Models for PDF compression options, derived settings, analysis and responses.
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from paperflow.models.base import BaseMetrics, BaseSizeComparison


class CompressionLevel(str, Enum):
    """How aggressively images and resolution are reduced"""
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    MAXIMUM = "maximum"

    @classmethod
    def parse(cls, value) -> "CompressionLevel":
        """
        Parse a level from user input.

        Accepts an existing member or a case-insensitive name/value.
        Empty input maps to MEDIUM.

        Raises:
            ValueError: If the value is not a known level
        """
        if isinstance(value, cls):
            return value
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.MEDIUM
        if isinstance(value, str):
            normalized = value.strip().lower()
            for level in cls:
                if level.value == normalized:
                    return level
        allowed = ", ".join(level.value for level in cls)
        raise ValueError(f"Unknown compression level {value!r} (expected one of: {allowed})")


class CompressionOptions(BaseModel):
    """Options for a single compression request"""
    image_compression_level: CompressionLevel = Field(
        CompressionLevel.MEDIUM,
        description="Image compression level to apply"
    )
    image_quality: int = Field(
        75, ge=1, le=100,
        description="JPEG image quality (1-100). Advisory: Ghostscript derives quality from the level"
    )
    downsample_images: bool = Field(True, description="Whether to downsample images")
    downsample_dpi: int = Field(150, ge=72, le=300, description="Target DPI for downsampled images")
    remove_metadata: bool = Field(False, description="Whether to strip document metadata")
    flatten_form_fields: bool = Field(
        False, description="Accepted for compatibility; form flattening is not performed"
    )
    deduplicate_images: bool = Field(
        True, description="Accepted for compatibility; no image deduplication is performed"
    )

    @field_validator("image_compression_level", mode="before")
    @classmethod
    def _parse_level(cls, value):
        return CompressionLevel.parse(value)


class CompressionSettings(BaseModel):
    """Tunable parameters derived from file size, page count and level"""
    image_quality: int
    downsample_dpi: int
    objects_per_tick: int = 100
    deduplicate_resources: bool = True
    use_object_streams: bool = True


class CompressionAnalysis(BaseModel):
    """Heuristic compression analysis of a PDF"""
    file_size_bytes: int = Field(..., description="Size of the file in bytes")
    file_size_kb: int = Field(..., description="Size of the file in KB (rounded)")
    page_count: int = Field(..., description="Number of pages")
    avg_page_size_kb: int = Field(..., description="Average bytes per page in KB (rounded)")
    potential_savings: int = Field(0, description="Estimated savings percentage (multiple of 5, max 95)")
    recommendations: List[str] = Field(default_factory=list, description="Recommendations in rule order")
    has_images: Optional[bool] = Field(None, description="True when pages average more than 100KB")
    estimated_image_size_bytes: Optional[int] = Field(
        None, description="Rough image payload (70% of the file) when images are likely"
    )
    has_metadata: Optional[bool] = Field(None, description="Any of Title/Author/Subject/Keywords present")
    has_form_fields: bool = Field(False, description="Form field detection is not implemented")


class CompressionStats(BaseSizeComparison):
    """Size comparison between an original and a compressed PDF"""
    original_size_kb: int
    compressed_size_kb: int
    size_reduction: int
    size_reduction_kb: int
    precise_ratio: float = Field(..., description="Compression ratio with one decimal place")


class CompressionResponse(BaseSizeComparison, BaseMetrics):
    """Response model for compression when JSON info is requested"""
    message: str = Field("PDF compressed successfully")
    compression_id: str = Field(..., description="ID for the compression statistics lookup")
    compression_level: CompressionLevel = Field(..., description="Level that was requested")
    original_filename: Optional[str] = Field(None, description="Name of the uploaded file")
    compression_time: float = Field(..., description="Time taken for compression in seconds")


class AnalysisResponse(BaseModel):
    """Response model for compression analysis"""
    file_size: str = Field(..., description="File size, e.g. '1024 KB'")
    page_count: int
    has_images: bool
    estimated_image_size: str = Field(..., description="e.g. '~800 KB' or 'None detected'")
    has_form_fields: bool
    recommendations: List[str]
    estimated_savings: str = Field(..., description="Savings range, e.g. '30-40%'")
    metadata: str = Field(..., description="'Present' or 'None detected'")


class CompressionStatsRecord(BaseModel):
    """Stored statistics for a completed compression"""
    id: str
    original_size: int
    compressed_size: int
    compression_ratio: float
    compression_level: CompressionLevel
    timestamp: str
