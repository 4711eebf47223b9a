"""
Runtime configuration for the PaperFlow API.

All values are read from environment variables once, at import time.
"""
import os


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return int(value)


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes")


LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Server
PORT = _env_int("PORT", 8000)
WORKERS = _env_int("WORKERS", 1)
DEBUG = _env_bool("DEBUG")

# Uploads
UPLOADS_DIR = os.path.abspath(os.environ.get("UPLOADS_DIR", os.path.join(os.getcwd(), "uploads")))
MAX_FILE_SIZE = _env_int("MAX_FILE_SIZE", 15 * 1024 * 1024)

# Ghostscript
GS_BINARY = os.environ.get("GS_BINARY", "gs")
GS_TIMEOUT_SECONDS = _env_int("GS_TIMEOUT_SECONDS", 120)
GS_PROBE_TIMEOUT_SECONDS = _env_int("GS_PROBE_TIMEOUT_SECONDS", 5)
GS_MAX_CONCURRENCY = max(1, _env_int("GS_MAX_CONCURRENCY", 2))

# Compression stats store
STATS_TTL_SECONDS = _env_int("STATS_TTL_SECONDS", 30 * 60)
STATS_MAX_ENTRIES = _env_int("STATS_MAX_ENTRIES", 1000)

# Branding written into documents when metadata is stripped
PDF_CREATOR = "PaperFlow"
PDF_PRODUCER = "PaperFlow PDF Compression"
