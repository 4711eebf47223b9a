"""
Ghostscript adapter for PDF compression.

Maps a compression level to a pdfwrite preset plus explicit downsampling
flags and runs Ghostscript as a blocking, timeout-bounded subprocess.
The number of concurrent Ghostscript processes is capped by a semaphore.
"""
import os
import logging
import subprocess
import threading
from typing import List, Optional

from paperflow import config
from paperflow.core.exceptions import GhostscriptError, GhostscriptUnavailableError
from paperflow.models.compression import CompressionLevel

# Set up logging
logger = logging.getLogger(__name__)

PDF_SETTINGS_PRESETS = {
    CompressionLevel.LOW: "prepress",
    CompressionLevel.MEDIUM: "printer",
    CompressionLevel.HIGH: "ebook",
    CompressionLevel.MAXIMUM: "screen",
    CompressionLevel.NONE: "default",
}

# level -> (color/gray resolution, mono resolution, downsample type, downsample threshold)
DOWNSAMPLE_OVERRIDES = {
    CompressionLevel.LOW: (150, 300, "Bicubic", "1.5"),
    CompressionLevel.MEDIUM: (120, 300, "Bicubic", "1.3"),
    CompressionLevel.HIGH: (96, 200, "Average", "1.0"),
    CompressionLevel.MAXIMUM: (72, 144, "Average", "1.0"),
}

MAXIMUM_EXTRA_FLAGS = [
    "-dEncodeColorImages=true",
    "-dEncodeGrayImages=true",
    "-dCompressPages=true",
]

BASE_FLAGS = [
    "-q",
    "-dNOPAUSE",
    "-dBATCH",
    "-dSAFER",
    "-sDEVICE=pdfwrite",
]


def level_flags(level: CompressionLevel) -> List[str]:
    """
    Ghostscript flags for a compression level: the preset followed by its overrides.

    NONE only selects the default preset; its own resolution defaults apply.
    """
    flags = [f"-dPDFSETTINGS=/{PDF_SETTINGS_PRESETS[level]}"]

    overrides = DOWNSAMPLE_OVERRIDES.get(level)
    if overrides is None:
        return flags

    resolution, mono_resolution, downsample_type, threshold = overrides
    flags += [
        f"-dColorImageResolution={resolution}",
        f"-dGrayImageResolution={resolution}",
        f"-dMonoImageResolution={mono_resolution}",
        f"-dColorImageDownsampleType=/{downsample_type}",
        f"-dColorImageDownsampleThreshold={threshold}",
    ]
    if level == CompressionLevel.MAXIMUM:
        flags += MAXIMUM_EXTRA_FLAGS
    return flags


def build_command(
    input_path: str,
    output_path: str,
    level: CompressionLevel,
    binary: str = "gs"
) -> List[str]:
    """
    Build the Ghostscript argument vector.

    Paths are passed as separate arguments, so no shell quoting is involved.
    """
    return (
        [binary]
        + BASE_FLAGS
        + level_flags(level)
        + [
            "-dCompatibilityLevel=1.4",
            "-dAutoRotatePages=/None",
            f"-sOutputFile={output_path}",
            input_path,
        ]
    )


class GhostscriptCompressor:
    """Runs Ghostscript with bounded concurrency and a per-call timeout."""

    def __init__(
        self,
        binary: str = config.GS_BINARY,
        timeout: float = config.GS_TIMEOUT_SECONDS,
        probe_timeout: float = config.GS_PROBE_TIMEOUT_SECONDS,
        max_concurrency: int = config.GS_MAX_CONCURRENCY
    ):
        self.binary = binary
        self.timeout = timeout
        self.probe_timeout = probe_timeout
        self._slots = threading.BoundedSemaphore(max(1, max_concurrency))
        self.version: Optional[str] = None

    def is_available(self) -> bool:
        """
        Check whether Ghostscript can be executed.

        Tries `gs -v` first and `gs --version` as a fallback.
        """
        for flag in ("-v", "--version"):
            try:
                result = subprocess.run(
                    [self.binary, flag],
                    capture_output=True,
                    text=True,
                    check=True,
                    timeout=self.probe_timeout
                )
            except (subprocess.SubprocessError, OSError) as e:
                logger.debug(f"Ghostscript probe '{self.binary} {flag}' failed: {e}")
                continue

            output = result.stdout.strip()
            self.version = output.splitlines()[0] if output else None
            logger.debug(f"Ghostscript detected: {self.version}")
            return True

        self.version = None
        logger.warning(f"Ghostscript not available ('{self.binary}' could not be executed)")
        return False

    def compress(
        self,
        input_path: str,
        output_path: str,
        level: CompressionLevel = CompressionLevel.MEDIUM
    ) -> None:
        """
        Compress a PDF with Ghostscript.

        Args:
            input_path: Path to the input PDF file
            output_path: Path where the compressed PDF should be written
            level: Compression level to apply

        Raises:
            GhostscriptUnavailableError: If the binary cannot be executed
            GhostscriptError: If Ghostscript fails, times out or writes no output
        """
        cmd = build_command(input_path, output_path, level, self.binary)
        logger.info(f"Running Ghostscript with /{PDF_SETTINGS_PRESETS[level]} preset ({level.value} level)")
        logger.debug(f"Ghostscript command: {' '.join(cmd)}")

        with self._slots:
            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout
                )
            except FileNotFoundError as e:
                raise GhostscriptUnavailableError(f"Ghostscript binary not found: {self.binary}") from e
            except subprocess.TimeoutExpired as e:
                raise GhostscriptError(f"Ghostscript timed out after {self.timeout}s") from e

        if result.stdout:
            logger.debug(f"Ghostscript stdout: {result.stdout.strip()}")

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            logger.error(f"Ghostscript exited with code {result.returncode}: {stderr}")
            raise GhostscriptError(
                f"Ghostscript exited with code {result.returncode}",
                returncode=result.returncode,
                stderr=stderr
            )

        if result.stderr:
            logger.debug(f"Ghostscript stderr: {result.stderr.strip()}")

        if not os.path.exists(output_path) or os.path.getsize(output_path) == 0:
            raise GhostscriptError("Ghostscript failed to create the output file", returncode=0)


# Shared adapter used by the compression service
ghostscript = GhostscriptCompressor()


def is_ghostscript_available() -> bool:
    """Check whether the configured Ghostscript binary can be executed."""
    return ghostscript.is_available()


def compress_with_ghostscript(
    input_path: str,
    output_path: str,
    level: CompressionLevel = CompressionLevel.MEDIUM
) -> None:
    """Compress a PDF with the shared Ghostscript adapter."""
    ghostscript.compress(input_path, output_path, level)
