"""
Opening source PDFs with pikepdf and reading document properties.
"""
import os
import logging

import pikepdf

from paperflow.core.exceptions import SourceNotFoundError, SourceUnreadableError

logger = logging.getLogger(__name__)

METADATA_KEYS = ("/Title", "/Author", "/Subject", "/Keywords")


def get_source_size(file_path: str) -> int:
    """
    Return the size of a source file in bytes.

    Raises:
        SourceNotFoundError: If the file does not exist
        SourceUnreadableError: If the file cannot be stat'ed
    """
    if not os.path.isfile(file_path):
        raise SourceNotFoundError(f"Source file not found: {file_path}")
    try:
        return os.path.getsize(file_path)
    except OSError as e:
        raise SourceUnreadableError(f"Cannot read source file {file_path}: {e}") from e


def open_source_pdf(file_path: str) -> pikepdf.Pdf:
    """
    Open a PDF for reading. The caller owns the returned document and must close it.

    Raises:
        SourceNotFoundError: If the file does not exist
        SourceUnreadableError: If the file is not a readable PDF
    """
    if not os.path.isfile(file_path):
        raise SourceNotFoundError(f"Source file not found: {file_path}")
    try:
        pdf = pikepdf.open(file_path)
    except pikepdf.PasswordError as e:
        raise SourceUnreadableError(f"PDF is password protected: {file_path}") from e
    except (pikepdf.PdfError, OSError) as e:
        raise SourceUnreadableError(f"Failed to parse PDF {file_path}: {e}") from e

    if len(pdf.pages) == 0:
        pdf.close()
        raise SourceUnreadableError(f"PDF has no pages: {file_path}")
    return pdf


def has_document_metadata(pdf: pikepdf.Pdf) -> bool:
    """True if any of Title, Author, Subject or Keywords is set to a non-empty value."""
    info = pdf.trailer.get("/Info")
    if info is None:
        return False
    for key in METADATA_KEYS:
        value = info.get(key)
        if value is not None and str(value).strip():
            return True
    return False
