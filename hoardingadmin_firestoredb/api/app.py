from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..context import AdminContext
from ..utils.config import ACTIVITY_NOTIFIER_ENABLED, CORS_ORIGINS
from ..utils.logger import logger
from .dependencies import get_current_session
from .routes import (
    auth,
    bookings,
    customers,
    dashboard,
    hero,
    hoardings,
    media,
    messages,
    notifications,
    reports,
    settings,
    users,
    workers,
)

PROTECTED_ROUTERS = [
    dashboard.router,
    users.router,
    workers.router,
    hoardings.router,
    bookings.router,
    customers.router,
    messages.router,
    hero.router,
    media.router,
    notifications.router,
    reports.router,
    settings.router,
]


def create_app(context: Optional[AdminContext] = None, start_notifier: bool = ACTIVITY_NOTIFIER_ENABLED) -> FastAPI:
    """Admin API. Pass a prebuilt context to run against an emulator or a test double."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.context = context or AdminContext()
        if start_notifier:
            await app.state.context.notifications.purge_older_than()
            app.state.context.notifier.start()
        logger.info("🚀 Hoarding admin API started")
        try:
            yield
        finally:
            app.state.context.close()
            logger.info("👋 Hoarding admin API stopped")

    app = FastAPI(title="Hoarding Admin API", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router, prefix="/api/auth")
    for router in PROTECTED_ROUTERS:
        app.include_router(router, prefix="/api", dependencies=[Depends(get_current_session)])

    @app.get("/")
    async def root():
        return {"message": "Hoarding Admin API", "version": __version__}

    return app
