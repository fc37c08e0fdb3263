"""Register all route modules on the FastAPI app."""

from fastapi import FastAPI

from .root import router as root_router
from .recommend import router as recommend_router
from .catalog import router as catalog_router


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the app."""
    app.include_router(root_router)
    app.include_router(recommend_router, prefix="/api", tags=["recommend"])
    app.include_router(catalog_router, prefix="/api/catalog", tags=["catalog"])
