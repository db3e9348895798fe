"""Main API router: combines all endpoint routers."""

from fastapi import APIRouter

from carecommon.api.health import router as health_router
from carecommon.api.static import router as static_router

api_router = APIRouter()

# Health check
api_router.include_router(health_router, tags=["Health"])

# Static assets are exported separately, mounted at app root, after everything else
static_asset_router = static_router
