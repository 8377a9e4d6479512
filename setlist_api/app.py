"""FastAPI application factory."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from setlist_api.core.config import get_settings
from setlist_api.core.errors import ServiceError
from setlist_api.core.logging_config import setup_logging
from setlist_api.db.create_tables import create_all
from setlist_api.routers import auth as auth_router
from setlist_api.routers import friends as friends_router
from setlist_api.routers import notifications as notifications_router
from setlist_api.routers import setlists as setlists_router
from setlist_api.routers import songs as songs_router
from setlist_api.services.container import Services, build_services

logger = logging.getLogger(__name__)


def create_app(services: Optional[Services] = None) -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file or None)
    owns_store = services is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if owns_store:
            create_all()
        yield

    app = FastAPI(title="Setlist Manager API", lifespan=lifespan)
    app.state.services = services or build_services(settings=settings)

    allowed_cors = {settings.public_base_url, *settings.cors_origins}
    if not settings.is_production:
        allowed_cors.update({"http://localhost:3000", "http://127.0.0.1:3000"})
    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted(o for o in allowed_cors if o),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(ServiceError)
    async def _service_error(request: Request, exc: ServiceError):
        logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    app.include_router(auth_router.router)
    app.include_router(friends_router.router)
    app.include_router(songs_router.router)
    app.include_router(setlists_router.router)
    app.include_router(notifications_router.router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
