"""
PaperFlow PDF Compression API Entry Point

This file serves as the main entry point for the application,
importing and running the FastAPI application defined in the paperflow package.

Run with uvicorn:
    uvicorn main:app --reload
"""
import logging
import subprocess
import sys

from paperflow import config

# Configure root logger
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format=config.LOG_FORMAT,
    stream=sys.stdout
)

# Set up logger
logger = logging.getLogger(__name__)

# Check that required dependencies are installed
try:
    import fastapi
    import pikepdf
    import psutil
    logger.info(f"All required dependencies are available (pikepdf {pikepdf.__version__})")
except ImportError as e:
    logger.critical(f"Missing required dependency: {str(e)}")
    logger.critical("Please install all dependencies: pip install -e .")
    sys.exit(1)

# Check for Ghostscript
try:
    subprocess.run([config.GS_BINARY, "--version"], check=True, capture_output=True, timeout=config.GS_PROBE_TIMEOUT_SECONDS)
    logger.info("Ghostscript is installed and working")
except (subprocess.SubprocessError, OSError):
    logger.warning("Ghostscript is not installed or not working. Compression will use the pikepdf fallback only.")

from paperflow import app

# Entry point for running with uvicorn
if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting PaperFlow API on port {config.PORT} with {config.WORKERS} workers")

    uvicorn.run(
        "paperflow:app",
        host="0.0.0.0",
        port=config.PORT,
        workers=config.WORKERS,
        reload=config.DEBUG
    )
