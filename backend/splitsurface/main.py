"""
Main application module for the split surface backend.

This file sets up the FastAPI application, configures CORS so a
drawing frontend can make cross-origin requests, mounts the static
frontend files when they exist, and exposes a simple health check
endpoint.

The partition router is included under the `/api` namespace.
"""

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .api.routes_partition import router as partition_router


def create_app() -> FastAPI:
    """Factory to create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance.
    """
    app = FastAPI(title="splitsurface")

    # Allow all origins by default.  In production you should restrict
    # this to the domains that are allowed to access your API.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check endpoint for monitoring and deployment probes.
    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(partition_router, prefix="/api", tags=["partition"])

    # Mount the frontend as static files if it exists.  The frontend
    # directory is located two levels up from this file.
    frontend_dir = Path(__file__).resolve().parents[2] / "frontend"
    if frontend_dir.exists():
        app.mount(
            "/",
            StaticFiles(directory=str(frontend_dir), html=True),
            name="frontend",
        )

    return app


# Create the application instance.  Uvicorn will import this when
# running `uvicorn splitsurface.main:app` from within the backend directory.
app = create_app()
