"""Gateway application factory — HTTP and MCP/WebSocket on one FastAPI app."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from evomcp import SERVICE_NAME, __version__
from evomcp.core.config import GatewaySettings
from evomcp.core.dispatch import Dispatcher
from evomcp.server import http, websocket

if TYPE_CHECKING:
    from evomcp.core.registry import ToolRegistry

logger = logging.getLogger(__name__)


def create_app(registry: ToolRegistry, settings: GatewaySettings | None = None) -> FastAPI:
    """Build the gateway app around an already-constructed registry.

    The dispatcher is stored on ``app.state`` so both adapters share it
    without module-level globals.
    """
    settings = settings or GatewaySettings()

    app = FastAPI(
        title=SERVICE_NAME,
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.dispatcher = Dispatcher(registry, credential_markers=settings.credential_markers)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(http.router)
    app.include_router(websocket.router)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _internal_error_handler)

    return app


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={"error": "Endpoint not found", "available_endpoints": http.ENDPOINTS},
        )
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def _internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc
    )
    return JSONResponse(
        status_code=500,
        content=http.error_body("Internal server error", str(exc)),
    )
