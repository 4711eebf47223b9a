"""
Fallback PDF compression with pikepdf.

The document is rebuilt page by page into a new PDF, which leaves orphaned
objects behind, and then written with object streams and maximum flate
compression. No image recompression happens on this path.
"""
import logging
from typing import NamedTuple, Optional

import pikepdf

from paperflow import config
from paperflow.core.compression_settings import calculate_settings
from paperflow.models.compression import CompressionOptions, CompressionSettings

# Set up logging
logger = logging.getLogger(__name__)

FLATE_COMPRESSION_LEVEL = 9

# Rough bytes-per-object used to approximate file size from the object table
APPROX_BYTES_PER_OBJECT = 500

STRIPPED_KEYS = ("/Title", "/Author", "/Subject", "/Keywords")
PRESERVED_KEYS = ("/Title", "/Author", "/Subject")

pikepdf.settings.set_flate_compression_level(FLATE_COMPRESSION_LEVEL)


class BasicCompressionResult(NamedTuple):
    """Outcome of the fallback compressor: the document to save, plus a warning if it degraded to a no-op."""
    pdf: pikepdf.Pdf
    warning: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.warning is not None


def _strip_metadata(pdf: pikepdf.Pdf) -> None:
    info = pdf.docinfo
    for key in STRIPPED_KEYS:
        info[key] = ""
    info["/Creator"] = config.PDF_CREATOR
    info["/Producer"] = config.PDF_PRODUCER


def _copy_metadata(source: pikepdf.Pdf, target: pikepdf.Pdf) -> None:
    source_info = source.trailer.get("/Info")
    if source_info is None:
        return
    for key in PRESERVED_KEYS:
        try:
            value = source_info.get(key)
            if value is not None and str(value):
                target.docinfo[key] = str(value)
        except Exception as e:
            logger.debug(f"Could not copy metadata field {key}: {e}")


def apply_basic_compression(
    source: pikepdf.Pdf,
    options: Optional[CompressionOptions] = None
) -> BasicCompressionResult:
    """
    Rebuild a document for re-serialization.

    Never raises: on any internal failure the source document is returned
    unchanged together with a warning.

    Args:
        source: Open source document; must stay open until the result is saved
        options: Compression options

    Returns:
        The rebuilt document, or the source document and a warning
    """
    options = options or CompressionOptions()
    level = options.image_compression_level
    new_pdf = None

    try:
        new_pdf = pikepdf.Pdf.new()
        new_pdf.pages.extend(source.pages)

        if options.remove_metadata:
            logger.info("Removing document metadata")
            _strip_metadata(new_pdf)
        else:
            _copy_metadata(source, new_pdf)

        approx_size = len(source.objects) * APPROX_BYTES_PER_OBJECT
        settings = calculate_settings(approx_size, len(new_pdf.pages), level)
        logger.info(
            f"Basic compression ({level.value}): ~{approx_size} bytes, {len(new_pdf.pages)} pages, "
            f"quality={settings.image_quality}, dpi={settings.downsample_dpi}, "
            f"objects_per_tick={settings.objects_per_tick}"
        )

        if options.flatten_form_fields:
            logger.info("flatten_form_fields requested; form flattening is not supported and was skipped")
        if options.deduplicate_images:
            logger.debug("deduplicate_images has no effect beyond unreferenced resource removal")

        new_pdf.remove_unreferenced_resources()
        return BasicCompressionResult(new_pdf)

    except Exception as e:
        logger.warning(f"Basic compression failed, keeping the original document: {e}", exc_info=True)
        if new_pdf is not None:
            new_pdf.close()
        return BasicCompressionResult(source, warning=str(e))


def save_compressed(
    pdf: pikepdf.Pdf,
    output_path: str,
    settings: Optional[CompressionSettings] = None
) -> None:
    """
    Write a document with library-level compression.

    Object streams are generated, every stream is flate-compressed (existing
    flate streams are recompressed at level 9) and content streams are
    normalized. The document ID is derived from the content, so identical
    input always produces identical bytes.
    """
    use_object_streams = settings.use_object_streams if settings else True
    pdf.save(
        output_path,
        compress_streams=True,
        stream_decode_level=pikepdf.StreamDecodeLevel.generalized,
        object_stream_mode=(
            pikepdf.ObjectStreamMode.generate if use_object_streams else pikepdf.ObjectStreamMode.preserve
        ),
        recompress_flate=True,
        normalize_content=True,
        deterministic_id=True
    )
