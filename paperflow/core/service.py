"""
PDF compression service.

Chooses between Ghostscript and the pikepdf fallback for each request:
Ghostscript is tried first when it can be executed, and its output is kept
only when it is at least 1% smaller than the source. Otherwise the
document is rebuilt and re-serialized with pikepdf.
"""
import os
import shutil
import logging
from typing import Optional

from paperflow import config
from paperflow.core.analyzer import analyze_for_compression, enrich_analysis
from paperflow.core.basic import apply_basic_compression, save_compressed
from paperflow.core.compression_settings import calculate_settings
from paperflow.core.documents import get_source_size, open_source_pdf
from paperflow.core.exceptions import CompressionError
from paperflow.core.ghostscript import GhostscriptCompressor, ghostscript as default_ghostscript
from paperflow.models.compression import CompressionAnalysis, CompressionOptions
from paperflow.utils.file_handling import cleanup_file, get_upload_filepath, temp_file_context
from paperflow.utils.metrics import log_compression_result

# Set up logging
logger = logging.getLogger(__name__)

# Ghostscript output must be below this fraction of the original size
GHOSTSCRIPT_ACCEPT_RATIO = 0.99


class PdfCompressionService:
    """Compresses and analyzes PDF files stored in the uploads directory."""

    def __init__(
        self,
        uploads_dir: Optional[str] = None,
        ghostscript: Optional[GhostscriptCompressor] = None
    ):
        self.uploads_dir = uploads_dir or config.UPLOADS_DIR
        self.ghostscript = ghostscript or default_ghostscript
        self.ghostscript_available = False

    def startup_check(self) -> bool:
        """Probe Ghostscript once at application startup and log the result."""
        self.ghostscript_available = self.ghostscript.is_available()
        if self.ghostscript_available:
            logger.info(f"Ghostscript is available for PDF compression ({self.ghostscript.version})")
        else:
            logger.warning("Ghostscript is not available. Falling back to basic PDF compression.")
        return self.ghostscript_available

    def _try_ghostscript(self, file_path: str, output_path: str, options: CompressionOptions, original_size: int) -> bool:
        """
        Run Ghostscript into a scratch file and copy it to output_path if it is small enough.

        Returns:
            True if the Ghostscript output was accepted
        """
        level = options.image_compression_level

        with temp_file_context("gs-compressed", directory=self.uploads_dir) as scratch_path:
            try:
                self.ghostscript.compress(file_path, scratch_path, level)
                scratch_size = os.path.getsize(scratch_path)

                if scratch_size >= original_size * GHOSTSCRIPT_ACCEPT_RATIO:
                    logger.warning(
                        f"Ghostscript did not reduce file size significantly "
                        f"({original_size} -> {scratch_size} bytes), discarding"
                    )
                    return False

                shutil.copyfile(scratch_path, output_path)
                log_compression_result(f"Ghostscript ({level.value})", original_size, scratch_size)
                return True

            except Exception as e:
                logger.error(f"Ghostscript compression failed: {e}")
                cleanup_file(output_path)
                return False

    def _basic_compression(self, file_path: str, output_path: str, options: CompressionOptions, original_size: int) -> None:
        """
        Rebuild the document with pikepdf and write it to output_path.

        Raises:
            CompressionError: If the document cannot be written
        """
        logger.info("Using basic pikepdf compression")
        try:
            with open_source_pdf(file_path) as source:
                settings = calculate_settings(original_size, len(source.pages), options.image_compression_level)
                result = apply_basic_compression(source, options)
                if result.degraded:
                    logger.warning(f"Basic compression degraded to a plain rewrite: {result.warning}")
                try:
                    save_compressed(result.pdf, output_path, settings)
                finally:
                    if result.pdf is not source:
                        result.pdf.close()
        except Exception as e:
            cleanup_file(output_path)
            raise CompressionError(f"Failed to compress PDF: {e}") from e

        log_compression_result("Basic", original_size, os.path.getsize(output_path))

    def compress_pdf(self, file_path: str, options: Optional[CompressionOptions] = None) -> str:
        """
        Compress a PDF to reduce its file size.

        Args:
            file_path: Path to the PDF file
            options: Compression options

        Returns:
            Path to the compressed PDF file

        Raises:
            SourceNotFoundError: If the source file does not exist
            SourceUnreadableError: If the source is not a readable PDF
            CompressionError: If no strategy produced an output file
        """
        options = options or CompressionOptions()

        original_size = get_source_size(file_path)
        with open_source_pdf(file_path) as pdf:
            page_count = len(pdf.pages)

        logger.info(
            f"Starting PDF compression: {round(original_size / 1024)} KB, {page_count} pages, "
            f"level {options.image_compression_level.value}"
        )

        output_path = get_upload_filepath("compressed", directory=self.uploads_dir)

        # Availability can change between calls, so probe every time
        if self.ghostscript.is_available():
            if self._try_ghostscript(file_path, output_path, options, original_size):
                return output_path
        else:
            logger.warning("Ghostscript not available, using basic compression")

        self._basic_compression(file_path, output_path, options, original_size)
        return output_path

    def analyze_pdf_compression(self, file_path: str) -> CompressionAnalysis:
        """
        Analyze a PDF file to identify compression opportunities.

        Args:
            file_path: Path to the PDF file

        Returns:
            Analysis including recommendations and image/metadata hints
        """
        analysis = analyze_for_compression(file_path)
        return enrich_analysis(analysis, file_path)
