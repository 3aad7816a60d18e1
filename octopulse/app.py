"""
Application Factory

Builds the FastAPI application: API router, error handlers, CORS and the
service worker asset.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from octopulse import config
from octopulse.api import router as api_router
from octopulse.database import get_engine, init_db
from octopulse.errors import register_exception_handlers
from octopulse.push import get_push_sender

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        if config.DATABASE_URL == config.DEFAULT_DATABASE_URL:
            config.ensure_data_dir()
        init_db(get_engine())
        # resolve the sender once so a missing VAPID key is reported at startup
        get_push_sender()
        yield
    finally:
        logger.info("Application shutdown.")


def create_app(use_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title="OctoPulse",
        description="Relays GitHub stars, forks and follows to the browser via Web Push",
        version="0.1.0",
        lifespan=lifespan if use_lifespan else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=config.API_PREFIX)

    @app.get("/sw.js", include_in_schema=False)
    def service_worker():
        return FileResponse(
            config.STATIC_DIR / "sw.js", media_type="application/javascript"
        )

    return app
