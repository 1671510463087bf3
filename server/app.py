"""FastAPI application factory."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from server.dependencies import get_config
from server.middleware import RequestIDMiddleware
from server.routes import health, qa
from utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    logger.info("FastAPI server starting up")

    config = get_config()
    required_keys = ["AZURE_CLIENT_ID"]
    if config.SYNTHESIS_MODE == "generative":
        required_keys.append("OPENAI_API_KEY")
    missing = [k for k in required_keys if not getattr(config, k, None)]
    if missing:
        logger.warning(f"Missing environment variables: {missing}")

    yield

    logger.info("FastAPI server shutting down")


def create_app() -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title="SharePoint List Q&A",
        description="Answer questions from SharePoint list items",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)

    # API routes – registered first so /v1/* takes precedence over static files
    app.include_router(health.router)
    app.include_router(qa.router)

    # Serve the single-page UI from the /frontend directory at root path
    frontend_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), "frontend")
    if os.path.isdir(frontend_dir):
        app.mount("/", StaticFiles(directory=frontend_dir, html=True), name="frontend")
    else:
        logger.warning(f"Frontend directory not found at {frontend_dir}; skipping static mount")

    return app
