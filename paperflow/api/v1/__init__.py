"""
API v1 - PDF compression endpoints.
"""
from fastapi import APIRouter
from paperflow.api.v1.compress import router as compress_router
from paperflow.api.v1.stats import router as stats_router

router = APIRouter()
router.include_router(compress_router)
router.include_router(stats_router)
