"""Static asset catch-all route. Mounted last so API routes take precedence."""

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from carecommon.handlers.static import CACHE_CONTROL

router = APIRouter()


@router.get("/{path:path}", include_in_schema=False)
async def serve_static(path: str, request: Request):
    """Serve a file from the static asset table."""
    fd = request.app.state.static_assets.lookup(f"/{path}")
    if fd is None:
        return JSONResponse(
            status_code=404,
            content={"error": "not_found", "message": f"No static asset at /{path}"},
        )
    return Response(
        content=fd.raw_bytes(),
        media_type=fd.mime_type or "application/octet-stream",
        headers={"Cache-Control": CACHE_CONTROL},
    )
