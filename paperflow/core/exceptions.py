"""
Exceptions raised by the PDF compression pipeline.
"""
from typing import Optional


class PdfProcessingError(Exception):
    """Base class for all PDF processing errors."""


class SourceNotFoundError(PdfProcessingError, FileNotFoundError):
    """The source PDF does not exist."""


class SourceUnreadableError(PdfProcessingError, IOError):
    """The source file exists but cannot be read or parsed as a PDF."""


class GhostscriptUnavailableError(PdfProcessingError):
    """The Ghostscript binary could not be found or executed."""


class GhostscriptError(PdfProcessingError):
    """Ghostscript ran but failed to produce a usable output file."""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class CompressionError(PdfProcessingError):
    """Every compression strategy failed to produce an output file."""
