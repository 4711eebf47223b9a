"""
Utilities for upload storage and temporary file management.
"""
import os
import time
import uuid
import logging
import contextlib
from typing import Optional, Iterator

from fastapi import UploadFile

from paperflow import config

# Set up logging
logger = logging.getLogger(__name__)

UPLOAD_CHUNK_SIZE = 1024 * 1024


class UploadTooLargeError(ValueError):
    """The uploaded file exceeds the configured size limit."""


def get_upload_filepath(prefix: str, suffix: str = ".pdf", directory: Optional[str] = None) -> str:
    """
    Generate a unique path in the uploads directory.

    Args:
        prefix: Leading part of the file name (e.g. "compressed")
        suffix: File suffix/extension
        directory: Directory to use instead of the configured uploads directory

    Returns:
        Absolute path of the form <dir>/<prefix>-<millis>-<random><suffix>
    """
    directory = directory or config.UPLOADS_DIR
    millis = int(time.time() * 1000)
    return os.path.join(directory, f"{prefix}-{millis}-{uuid.uuid4().hex[:8]}{suffix}")


def cleanup_file(file_path: Optional[str]) -> None:
    """
    Delete a file if it exists. Failures are logged, never raised.

    Args:
        file_path: Path to the file to delete
    """
    if not file_path:
        return
    try:
        if os.path.exists(file_path):
            os.remove(file_path)
            logger.debug(f"Cleaned up file: {file_path}")
    except OSError as e:
        logger.error(f"Failed to clean up file {file_path}: {e}")


@contextlib.contextmanager
def temp_file_context(prefix: str, suffix: str = ".pdf", directory: Optional[str] = None) -> Iterator[str]:
    """
    Context manager that reserves a scratch file path and always deletes it.

    Args:
        prefix: Leading part of the file name
        suffix: File extension to use
        directory: Directory to use instead of the configured uploads directory

    Yields:
        Path to the scratch file (not created)
    """
    temp_path = get_upload_filepath(prefix, suffix, directory)
    try:
        yield temp_path
    finally:
        cleanup_file(temp_path)


async def save_upload(upload: UploadFile, max_size: Optional[int] = None, directory: Optional[str] = None) -> str:
    """
    Stream an uploaded file to the uploads directory.

    Args:
        upload: The uploaded file
        max_size: Maximum allowed size in bytes (defaults to MAX_FILE_SIZE)
        directory: Directory to use instead of the configured uploads directory

    Returns:
        Path of the stored file

    Raises:
        UploadTooLargeError: If the upload exceeds max_size
        ValueError: If the upload is empty
    """
    max_size = config.MAX_FILE_SIZE if max_size is None else max_size
    extension = os.path.splitext(upload.filename or "")[1].lower() or ".pdf"
    destination = get_upload_filepath("upload", extension, directory)

    written = 0
    try:
        with open(destination, "wb") as f:
            while True:
                chunk = await upload.read(UPLOAD_CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_size:
                    raise UploadTooLargeError(
                        f"File exceeds the maximum allowed size of {max_size} bytes"
                    )
                f.write(chunk)
    except Exception:
        cleanup_file(destination)
        raise

    if written == 0:
        cleanup_file(destination)
        raise ValueError("Uploaded file is empty")

    logger.info(f"Stored upload {upload.filename} ({written} bytes) at {destination}")
    return destination
