"""FastAPI transport for the notes MCP server.

Endpoints:
  POST   /           — JSON-RPC endpoint (initialize, tools/list, tools/call, ...)
  GET    /ping       — Liveness check
  GET    /notes      — Current notes as JSON
  GET    /notes/ui   — Current notes as escaped HTML
  GET    /metrics    — Prometheus metrics
  GET    /app/*      — Companion UI bundle, when present on disk
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

from .config import Settings, settings as default_settings
from .metrics import HTTP_DURATION, HTTP_REQUESTS, NOTES_STORED
from .protocol import PARSE_ERROR, Dispatcher, failure
from .storage import NoteStore, demo_notes
from .views import render_notes_page

logging.basicConfig(
    level=default_settings.log_level.upper(),
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)

# Endpoints excluded from HTTP metrics
_METRICS_EXCLUDE = {"/metrics", "/openapi.json", "/docs", "/redoc"}


def _endpoint_label(request: Request) -> str:
    """Route template for metrics labels; never the raw request path."""
    route = request.scope.get("route")
    if route is not None:
        return route.path
    if request.url.path.startswith("/app"):
        return "/app"
    return "unmatched"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


class MetricsMiddleware(BaseHTTPMiddleware):
    """Log every request and record its count and duration for Prometheus."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        logger.info("%s %s", request.method, path)
        if path in _METRICS_EXCLUDE:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start

        endpoint = _endpoint_label(request)
        HTTP_REQUESTS.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        HTTP_DURATION.labels(endpoint=endpoint).observe(elapsed)
        return response


def get_base_url(request: Request, config: Settings) -> str:
    """Public origin used in UI content items.

    MCP_PUBLIC_URL wins; otherwise the forwarded or direct Host header.
    """
    if config.public_url:
        return config.public_url
    headers = request.headers
    host = headers.get("x-forwarded-host") or headers.get("host") or ""
    proto = headers.get("x-forwarded-proto") or "http"
    return f"{proto}://{host}"


# --- Endpoints ---

router = APIRouter()


@router.post("/")
async def rpc(request: Request) -> Response:
    """Handle one JSON-RPC request envelope."""
    try:
        # NaN / Infinity are not JSON and cannot be echoed back
        payload = json.loads(await request.body(), parse_constant=_reject_constant)
    except ValueError as e:
        logger.warning("Unparseable request body: %s", e)
        return JSONResponse(failure(None, PARSE_ERROR, "Parse error"), status_code=400)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Request body: %s", json.dumps(payload, indent=2))

    state = request.app.state
    envelope = state.dispatcher.handle(
        payload, base_url=get_base_url(request, state.settings)
    )
    if envelope is None:
        return Response(status_code=204)
    return JSONResponse(envelope)


@router.get("/ping")
async def ping() -> dict[str, bool]:
    """Liveness check."""
    return {"ok": True}


@router.get("/notes")
async def list_notes(request: Request) -> dict[str, Any]:
    """Current notes, newest first."""
    store: NoteStore = request.app.state.store
    return {"notes": [n.to_wire() for n in store.list_all()]}


@router.get("/notes/ui", response_class=HTMLResponse)
async def notes_ui(request: Request) -> HTMLResponse:
    """Human-readable rendering of the current notes."""
    store: NoteStore = request.app.state.store
    return HTMLResponse(render_notes_page(store.list_all()))


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


# --- App factory ---


def create_app(
    settings: Settings | None = None, store: NoteStore | None = None
) -> FastAPI:
    """Build the FastAPI app around a note store.

    A fresh store (seeded with the demo notes unless SEED_DEMO_NOTES is
    false) is created when none is passed.
    """
    config = settings or default_settings
    if store is None:
        store = NoteStore(seed=demo_notes() if config.seed_demo_notes else ())

    app = FastAPI(title="Auxee Notes MCP", version="2.0.0")
    app.state.settings = config
    app.state.store = store
    app.state.dispatcher = Dispatcher(store, strict_methods=config.strict_methods)
    NOTES_STORED.set(store.count)

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    ui_dir = config.app_ui_dir
    if ui_dir.is_dir():
        app.mount("/app", StaticFiles(directory=ui_dir, html=True), name="app")
        logger.info("Apps UI mounted at /app -> %s", ui_dir)
    else:
        logger.warning("Missing /app UI at: %s", ui_dir)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(
        "MCP server running on http://localhost:%d", default_settings.port
    )
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)
