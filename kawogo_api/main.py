"""
FastAPI main application for Kawogo Care.
"""
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from kawogo_api.config import Settings, get_settings
from kawogo_api.dependencies import build_advice_service, build_classification_service
from kawogo_api.routes import analyze, health
from src.utils.logger import get_logger


PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


def resolve_frontend_dir(settings: Settings) -> Optional[str]:
    """Absolute frontend directory, or None if it is not configured or missing."""
    if not settings.frontend_dir:
        return None
    path = settings.frontend_dir
    if not os.path.isabs(path):
        path = os.path.join(PROJECT_ROOT, path)
    return path if os.path.isdir(path) else None


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (defaults to environment + config/api.yaml)

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    logger = get_logger(config=settings.logging.model_dump())
    frontend_dir = resolve_frontend_dir(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan context manager for FastAPI.
        Logs the configuration the server starts with.
        """
        logger.section("Kawogo Care API starting")
        logger.info(f"Environment: {settings.environment}")
        logger.info(f"Serving frontend from: {frontend_dir or 'not configured'}")
        logger.info(f"- Roboflow API: {'Configured' if settings.roboflow_configured else 'Missing'}")
        logger.info(f"- Gemini API: {'Configured' if settings.gemini_configured else 'Missing'}")

        yield

        logger.info("Shutting down API...")

    app = FastAPI(
        title=settings.title,
        version=settings.version,
        description=settings.description,
        lifespan=lifespan,
    )
    app.dependency_overrides[get_settings] = lambda: settings
    app.state.settings = settings
    app.state.classification_service = build_classification_service(settings)
    app.state.advice_service = build_advice_service(settings)

    # Configure CORS
    if settings.cors.enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors.origins,
            allow_credentials=settings.cors.allow_credentials,
            allow_methods=settings.cors.allow_methods,
            allow_headers=settings.cors.allow_headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected malformed request to {request.url.path}")
        body = {"error": "Invalid request"}
        if not settings.is_production:
            body["details"] = str(exc.errors())
        return JSONResponse(status_code=400, content=body)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error: {exc}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    # Include routers
    app.include_router(health.router, prefix="/api", tags=["Health"])
    app.include_router(analyze.router, prefix="/api", tags=["Analysis"])

    # Mount static frontend assets
    if frontend_dir:
        app.mount("/static", StaticFiles(directory=frontend_dir), name="static")

    @app.get("/", include_in_schema=False)
    async def root():
        """Serve the frontend entrypoint, or API information when there is none."""
        if frontend_dir:
            for name in ("index.html", "cd.html"):
                index_path = os.path.join(frontend_dir, name)
                if os.path.exists(index_path):
                    return FileResponse(index_path)

        return {
            "name": settings.title,
            "version": settings.version,
            "description": settings.description,
            "docs": "/docs",
            "health": "/api/health"
        }

    return app


app = create_app()


def run():
    """Console entry point: serve the app with uvicorn on the configured port."""
    settings = get_settings()
    uvicorn.run("kawogo_api.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
