"""HTTP surface for the flow runner.

Routes:
- GET  /api/health
- GET  /api/flows
- GET  /api/flows/{flow_id}
- POST /api/flows/{flow_id}/run

CLI failures are reported as ``{"success": false, "error": ...}`` with status
200; only unexpected exceptions become a 500.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from flowrunner import __version__
from flowrunner.config import Settings, get_settings
from flowrunner.models import FlowDetailResponse, FlowListResponse, FlowRunRequest, FlowRunResponse
from flowrunner.service import FlowService

logger = logging.getLogger("flowrunner.api")

router = APIRouter(prefix="/api", tags=["flows"])


def get_flow_service(request: Request) -> FlowService:
    return request.app.state.flow_service


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/flows", response_model=FlowListResponse, response_model_exclude_unset=True)
async def list_flows(service: FlowService = Depends(get_flow_service)):
    return await service.list_flows()


@router.get("/flows/{flow_id}", response_model=FlowDetailResponse, response_model_exclude_unset=True)
async def show_flow(flow_id: str, service: FlowService = Depends(get_flow_service)):
    return await service.show_flow(flow_id)


@router.post("/flows/{flow_id}/run", response_model=FlowRunResponse, response_model_exclude_unset=True)
async def run_flow(
    flow_id: str,
    body: FlowRunRequest | None = None,
    service: FlowService = Depends(get_flow_service),
):
    body = body or FlowRunRequest()
    return await service.run_flow(flow_id, input=body.input, max_iterations=body.max_iterations)


async def _unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})


def _mount_ui(app: FastAPI, static_dir: Path) -> None:
    """Serve the built UI, falling back to index.html for client-side routes."""

    root = static_dir.resolve()

    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_ui(full_path: str):
        if full_path.startswith("api/"):
            raise HTTPException(status_code=404, detail="Not Found")

        candidate = (root / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(root):
            return FileResponse(candidate)

        index = root / "index.html"
        if not index.is_file():
            raise HTTPException(status_code=404, detail="UI build not found")
        return FileResponse(index)


def create_app(settings: Settings | None = None, service: FlowService | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Flow Runner",
        description="HTTP bridge to the najie-flow CLI",
        version=__version__,
    )
    app.state.settings = settings
    app.state.flow_service = service or FlowService(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, _unhandled_exception)
    app.include_router(router)
    _mount_ui(app, settings.static_dir)

    logger.info("CORS origins: %s", settings.cors_origins)
    return app
