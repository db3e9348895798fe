"""Health check endpoint."""

import time

from fastapi import APIRouter, Request

from carecommon.config import get_settings
from carecommon.models.responses import HealthDependency, HealthResponse
from carecommon.services.config_loader import current_config

router = APIRouter()

_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check covering the landing config and the static asset table."""
    settings = get_settings()
    dependencies = {}

    # Landing config
    if settings.CONFIG_SOURCE == "none":
        dependencies["config"] = HealthDependency(status="healthy", message="not configured")
    elif current_config() is None:
        dependencies["config"] = HealthDependency(status="unhealthy", message="config not loaded")
    else:
        dependencies["config"] = HealthDependency(
            status="healthy",
            message=f"{len(current_config().landing)} landing(s)",
        )

    # Static assets
    assets = request.app.state.static_assets
    if settings.STATIC_ROOT and len(assets) == 0:
        dependencies["static"] = HealthDependency(status="degraded", message="no static assets loaded")
    else:
        dependencies["static"] = HealthDependency(status="healthy", message=f"{len(assets)} path(s)")

    # Overall status
    if all(d.status == "healthy" for d in dependencies.values()):
        status = "healthy"
    elif any(d.status == "unhealthy" for d in dependencies.values()):
        status = "unhealthy"
    else:
        status = "degraded"

    return HealthResponse(
        status=status,
        uptime_seconds=round(time.time() - _start_time, 2),
        dependencies=dependencies,
    )
