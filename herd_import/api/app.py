from __future__ import annotations

from fastapi import FastAPI

from herd_import import __version__
from herd_import.logging.init import setup_logging

from .routes import router

"""FastAPI application for the herd CSV importer."""

__all__ = [
    "app",
    "create_app",
]


def create_app() -> FastAPI:
    setup_logging()
    application = FastAPI(
        title="Herd Import API",
        description="Bulk CSV import and export of herd records",
        version=__version__,
    )
    application.include_router(router, prefix="/api", tags=["Import"])
    return application


app = create_app()
