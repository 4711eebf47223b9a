"""
API v1 - Compression statistics lookup.
"""
from fastapi import APIRouter, Depends, HTTPException

from paperflow.api.deps import get_stats_store
from paperflow.models.compression import CompressionStatsRecord
from paperflow.utils.stats_store import CompressionStatsStore

router = APIRouter(prefix="/v1/pdf", tags=["PDF Compression v1"])


@router.get("/compression-stats/{compression_id}", response_model=CompressionStatsRecord)
async def get_compression_stats(
    compression_id: str,
    stats_store: CompressionStatsStore = Depends(get_stats_store)
):
    """
    Get statistics for a recent compression.

    Statistics are kept for a limited time after the compression finished.
    """
    record = stats_store.get(compression_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Compression stats not found for this ID")
    return record
