"""API v1 module.

Contains all v1 API routes.
"""

from fastapi import APIRouter

from filestore.api.v1.files import router as files_router

router = APIRouter(prefix="/api/v1")
router.include_router(files_router)

__all__ = ["router"]
