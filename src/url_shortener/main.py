from contextlib import asynccontextmanager
from pathlib import Path
from typing import Mapping, Optional

from fastapi import FastAPI
from starlette.types import ASGIApp

from url_shortener.core.logging import configure_logging
from url_shortener.redirect.handler import MapHandler, map_handler
from url_shortener.redirect.loader import load_redirects
from url_shortener.web.routers import APP_VERSION
from url_shortener.web.routers import router as web_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield


def create_fallback_app() -> FastAPI:
    """FastAPI app answering /healthz and a JSON 404 for everything else."""
    app = FastAPI(title="URL Shortener", version=APP_VERSION, lifespan=lifespan)
    app.include_router(web_router)
    return app


def create_app(
    config_path: Path | str | None = None,
    redirects: Optional[Mapping[str, str]] = None,
    fallback: Optional[ASGIApp] = None,
) -> MapHandler:
    """
    Compose the served ASGI app.

    Paths from the YAML file take precedence, then the in-memory ``redirects``,
    then ``fallback`` (the FastAPI app by default).
    """
    base = fallback if fallback is not None else create_fallback_app()
    in_memory = map_handler(redirects or {}, base)
    return map_handler(load_redirects(config_path), in_memory)
