"""
API v1 - PDF compression and analysis endpoints.
"""
import os
import uuid
import shutil
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse
from pydantic import ValidationError

from paperflow.api.deps import get_compression_service, get_stats_store
from paperflow.core.service import PdfCompressionService
from paperflow.models.compression import (
    AnalysisResponse,
    CompressionLevel,
    CompressionOptions,
    CompressionResponse,
    CompressionStatsRecord
)
from paperflow.utils.file_handling import (
    UploadTooLargeError,
    cleanup_file,
    get_upload_filepath,
    save_upload
)
from paperflow.utils.metrics import PerformanceTimer, get_compression_stats, get_cpu_mem, round_half_up
from paperflow.utils.stats_store import CompressionStatsStore

# Set up logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/pdf", tags=["PDF Compression v1"])

PDF_CONTENT_TYPES = ("application/pdf", "application/x-pdf")


def _validate_pdf_upload(file: UploadFile) -> None:
    """Reject uploads that are neither named nor typed as PDF."""
    filename = (file.filename or "").lower()
    if not filename.endswith(".pdf") and file.content_type not in PDF_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Only PDF files are allowed")


async def _store_upload(file: UploadFile) -> str:
    try:
        return await save_upload(file)
    except UploadTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post(
    "/compress",
    response_model=CompressionResponse,
    responses={200: {"content": {"application/pdf": {}}}}
)
async def compress_pdf(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    image_compression: str = Form(CompressionLevel.MEDIUM.value),
    image_quality: int = Form(75),
    downsample_images: bool = Form(True),
    downsample_dpi: int = Form(150),
    remove_metadata: bool = Form(False),
    flatten_form_fields: bool = Form(False),
    deduplicate_images: bool = Form(True),
    info: bool = Query(False, description="Return compression info as JSON instead of the PDF"),
    service: PdfCompressionService = Depends(get_compression_service),
    stats_store: CompressionStatsStore = Depends(get_stats_store)
):
    """
    Compress a PDF file to reduce its size.

    - **file**: The PDF file to compress
    - **image_compression**: none, low, medium, high or maximum
    - **remove_metadata**: Strip title, author, subject and keywords
    - **info**: When true, return statistics as JSON instead of the file

    The compressed PDF is returned with `X-Compression-Id`, `X-Compression-Ratio`
    and `X-Compression-Stats-URL` headers.
    """
    _validate_pdf_upload(file)

    try:
        options = CompressionOptions(
            image_compression_level=image_compression,
            image_quality=image_quality,
            downsample_images=downsample_images,
            downsample_dpi=downsample_dpi,
            remove_metadata=remove_metadata,
            flatten_form_fields=flatten_form_fields,
            deduplicate_images=deduplicate_images
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    source_path = await _store_upload(file)

    try:
        with PerformanceTimer() as timer:
            output_path = await run_in_threadpool(service.compress_pdf, source_path, options)
    except Exception:
        # Background tasks do not run for error responses
        cleanup_file(source_path)
        raise

    compressed_path = output_path
    original_copy = None
    try:
        stats = get_compression_stats(source_path, output_path)
        if stats.compressed_size > stats.original_size:
            logger.warning(
                f"Compression increased size ({stats.original_size} -> {stats.compressed_size} bytes), "
                f"returning the original file"
            )
            original_copy = get_upload_filepath("compressed", directory=service.uploads_dir)
            shutil.copyfile(source_path, original_copy)
            output_path = original_copy
            stats = get_compression_stats(source_path, output_path)

        compression_id = str(uuid.uuid4())
        stats_store.put(CompressionStatsRecord(
            id=compression_id,
            original_size=stats.original_size,
            compressed_size=stats.compressed_size,
            compression_ratio=stats.precise_ratio,
            compression_level=options.image_compression_level,
            timestamp=datetime.now(timezone.utc).isoformat()
        ))
    except Exception:
        for path in (source_path, compressed_path, original_copy):
            cleanup_file(path)
        raise

    for path in (source_path, compressed_path, original_copy):
        background_tasks.add_task(cleanup_file, path)
    logger.info(
        f"Compressed {file.filename}: {stats.original_size_kb} KB -> {stats.compressed_size_kb} KB "
        f"({stats.precise_ratio}%) in {timer.execution_time:.2f}s"
    )

    if info:
        cpu_mem = get_cpu_mem()
        return CompressionResponse(
            original_size=stats.original_size,
            compressed_size=stats.compressed_size,
            compression_ratio=stats.compression_ratio,
            compression_id=compression_id,
            compression_level=options.image_compression_level,
            original_filename=file.filename,
            compression_time=round(timer.execution_time, 4),
            cpu_usage=cpu_mem["cpu_usage"],
            memory_usage=cpu_mem["memory_usage"]
        )

    download_name = f"compressed-{os.path.basename(file.filename or '') or 'document.pdf'}"
    return FileResponse(
        output_path,
        media_type="application/pdf",
        filename=download_name,
        headers={
            "X-Compression-Id": compression_id,
            "X-Compression-Ratio": str(stats.precise_ratio),
            "X-Compression-Stats-URL": f"/api/v1/pdf/compression-stats/{compression_id}"
        }
    )


@router.post("/compress/analyze", response_model=AnalysisResponse)
async def analyze_pdf(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    service: PdfCompressionService = Depends(get_compression_service)
):
    """
    Analyze a PDF file and provide compression recommendations.

    Nothing is compressed; the estimate is based on file size, page count
    and document metadata.
    """
    _validate_pdf_upload(file)
    source_path = await _store_upload(file)
    background_tasks.add_task(cleanup_file, source_path)

    try:
        analysis = await run_in_threadpool(service.analyze_pdf_compression, source_path)
    except Exception:
        cleanup_file(source_path)
        raise

    if analysis.has_images and analysis.estimated_image_size_bytes is not None:
        estimated_image_size = f"~{round_half_up(analysis.estimated_image_size_bytes / 1024)} KB"
    else:
        estimated_image_size = "None detected"

    savings = analysis.potential_savings
    return AnalysisResponse(
        file_size=f"{analysis.file_size_kb} KB",
        page_count=analysis.page_count,
        has_images=bool(analysis.has_images),
        estimated_image_size=estimated_image_size,
        has_form_fields=analysis.has_form_fields,
        recommendations=analysis.recommendations,
        estimated_savings=f"{savings}-{min(savings + 10, 95)}%",
        metadata="Present" if analysis.has_metadata else "None detected"
    )
