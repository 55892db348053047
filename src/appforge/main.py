"""
appforge - Main Entry Point
HTTP surface for application generation
"""

import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from injector import Injector
from prometheus_client import CONTENT_TYPE_LATEST

from appforge import __version__
from appforge.agents.stacks import list_stacks
from appforge.agents.templates import TemplateLibrary, TemplateNotFound
from appforge.clients.base import BackendError, UnknownBackendError
from appforge.clients.registry import AdapterRegistry
from appforge.core import (
    LogContext,
    Settings,
    ValidationError,
    configure_logging,
    create_container,
    get_logger,
    get_settings,
    init_tracer,
    new_request_id,
    set_trace_context,
)
from appforge.core.id import is_generation_id
from appforge.handlers.generation import GenerationHandler
from appforge.models.config import PROVIDERS
from appforge.monitoring import metrics_collector


logger = get_logger(__name__)

SERVICE_NAME = "appforge"


def create_app(container: Optional[Injector] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        container: Injector to resolve dependencies from (built from settings if None)
    """
    container = container or create_container()
    settings = container.get(Settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize services on startup, cleanup on shutdown"""
        configure_logging(settings.log_level, settings.json_logs)
        init_tracer(SERVICE_NAME)
        logger.info(
            "startup",
            backend=settings.backend,
            registered=container.get(AdapterRegistry).list_ids(),
            default_stack=settings.default_stack,
        )
        yield
        container.get(AdapterRegistry).close()
        logger.info("shutdown")

    app = FastAPI(
        title="appforge",
        description="Natural-language application generation for iOS, Android, React Native and web",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        set_trace_context(request.headers.get("x-trace-id", ""))
        request_id = request.headers.get("x-request-id") or new_request_id()
        with LogContext(request_id=request_id):
            response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response

    # ------------------------------------------------------------------
    # Error mapping
    # ------------------------------------------------------------------

    @app.exception_handler(TemplateNotFound)
    async def template_not_found(request: Request, exc: TemplateNotFound):
        return JSONResponse(status_code=404, content={"error": "template_not_found", "detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": "validation_error", "detail": str(exc)})

    @app.exception_handler(UnknownBackendError)
    async def unknown_backend(request: Request, exc: UnknownBackendError):
        return JSONResponse(status_code=400, content={"error": "unknown_backend", "detail": str(exc)})

    @app.exception_handler(BackendError)
    async def backend_error(request: Request, exc: BackendError):
        return JSONResponse(
            status_code=502,
            content={"error": "backend_unavailable", "backend": exc.backend, "detail": str(exc)},
        )

    def handler() -> GenerationHandler:
        return container.get(GenerationHandler)

    def stored(generation_id: str):
        result = handler().get(generation_id) if is_generation_id(generation_id) else None
        if result is None:
            raise HTTPException(status_code=404, detail=f"Generation not found: {generation_id}")
        return result

    # ------------------------------------------------------------------
    # Service
    # ------------------------------------------------------------------

    @app.get("/")
    def root():
        """Health check endpoint"""
        return {
            "status": "online",
            "service": SERVICE_NAME,
            "version": __version__,
            "timestamp": time.time(),
        }

    @app.get("/health")
    def health():
        """Detailed health check"""
        registry = container.get(AdapterRegistry)
        return {
            "status": "healthy",
            "backend": settings.backend,
            "backend_registered": settings.backend in registry,
            "backends": registry.list_ids(),
            "stored_generations": len(handler().list()),
        }

    @app.get("/metrics")
    def metrics():
        return Response(content=metrics_collector.get_metrics(), media_type=CONTENT_TYPE_LATEST)

    # ------------------------------------------------------------------
    # Catalogs
    # ------------------------------------------------------------------

    @app.get("/backends")
    def backends():
        registry = container.get(AdapterRegistry)
        return {
            "default": settings.backend,
            "backends": [
                {
                    **info.model_dump(mode="json"),
                    "registered": info.id.value in registry,
                }
                for info in PROVIDERS.values()
            ],
        }

    @app.get("/stacks")
    def stacks():
        return {
            "default": settings.default_stack,
            "stacks": [
                {"id": profile.id, **profile.conventions(), "config_files": list(profile.config_files)}
                for profile in list_stacks()
            ],
        }

    @app.get("/templates")
    def templates(
        category: Optional[str] = None,
        platform: Optional[str] = None,
        q: Optional[str] = None,
    ):
        library = container.get(TemplateLibrary)
        found = library.list_all()
        if category:
            found = [t for t in found if t in library.by_category(category)]
        if platform:
            found = [t for t in found if t in library.by_platform(platform)]
        if q:
            found = [t for t in found if t in library.search(q)]
        return {
            "categories": library.categories(),
            "templates": [t.model_dump(mode="json") for t in found],
        }

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    @app.post("/generate")
    def generate(payload: Dict[str, Any] = Body(...)):
        result = handler().generate(payload)
        return result.model_dump(mode="json", by_alias=True)

    @app.get("/generations")
    def list_generations():
        return {
            "generations": [
                {
                    "id": result.id,
                    "name": result.app.name,
                    "platforms": [t.value for t in result.metadata.platforms],
                    "succeeded": [t.value for t in result.code],
                    "failed": [f.target.value for f in result.failures],
                    "duration_ms": result.metadata.duration_ms,
                }
                for result in handler().list()
            ]
        }

    @app.get("/generations/{generation_id}")
    def get_generation(generation_id: str):
        return stored(generation_id).model_dump(mode="json", by_alias=True)

    @app.delete("/generations/{generation_id}")
    def delete_generation(generation_id: str):
        handler().delete(stored(generation_id).id)
        return {"deleted": generation_id}

    @app.post("/review")
    def review(payload: Dict[str, Any] = Body(...)):
        if "app" not in payload or "target" not in payload:
            raise ValidationError("Review requires 'app' and 'target'")
        result, report = handler().review(payload["app"], payload["target"], payload.get("listing"))
        return {**result.model_dump(mode="json"), "report": report}

    return app


def serve() -> None:
    """Run the HTTP server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "appforge.main:create_app",
        factory=True,
        host=settings.http_host,
        port=settings.http_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    serve()
