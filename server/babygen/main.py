"""FastAPI application entrypoint for the baby generator host surface."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from .config import settings
from .routers import generations

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


def build_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient()


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    # One pooled client shared by every generation run.
    async with build_http_client() as client:
        application.state.http_client = client
        logger.info("Baby generator API at %s", settings.api_base_url)
        yield
    application.state.http_client = None


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    application = FastAPI(
        title="Baby Generator",
        description="Submits baby image generation jobs and polls them to completion.",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.include_router(generations.router)

    @application.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
