"""
PaperFlow PDF Compression API

This package implements a FastAPI application for reducing PDF file size,
using two strategies:
- Ghostscript (pdfwrite with level-specific presets and downsampling)
- pikepdf re-serialization (page rebuild, object streams, flate level 9)

Features include:
- Compression with automatic fallback between strategies
- Compression analysis with recommendations and estimated savings
- Short-lived compression statistics lookup
"""
import os

from paperflow.config import UPLOADS_DIR

# Make sure the uploads directory exists before anything writes to it
os.makedirs(UPLOADS_DIR, exist_ok=True)

# Export the app instance
from paperflow.api import app

__all__ = ['app', 'UPLOADS_DIR']
