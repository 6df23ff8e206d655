"""API module for the file store.

Contains versioned API routers.
"""

from filestore.api.v1 import router as v1_router

__all__ = ["v1_router"]
