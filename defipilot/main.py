from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import health, query
from .config import settings
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .services import AppServices

API_NAME = "DefiPilot API"
API_VERSION = "0.1.0"
API_DESCRIPTION = "DeFi assistant backend: query routing, agent research and vault transactions"


def create_app(services: Optional[AppServices] = None) -> FastAPI:
    """Build the FastAPI app around ``services`` (created from settings if omitted)."""

    services = services or AppServices.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize the agent runtime at startup."""
        await app.state.services.initialize_agent()
        yield

    app = FastAPI(
        title=API_NAME,
        description=API_DESCRIPTION,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.services = services

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(query.router, tags=["Query"])

    @app.get("/")
    async def root():
        """Root endpoint with basic info"""
        return {
            "name": API_NAME,
            "version": API_VERSION,
            "description": API_DESCRIPTION,
            "endpoints": {
                "query": "POST /api/query",
                "approve": "POST /api/approve",
                "session": "GET /api/session/{session_id}",
                "health": "GET /health",
            },
        }

    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "defipilot.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
