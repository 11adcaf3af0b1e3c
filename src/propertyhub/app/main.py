"""FastAPI application entry point for the PropertyHub API."""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from propertyhub.app.config import get_settings
from propertyhub.app.errors import register_exception_handlers
from propertyhub.infra.database import async_session, init_db
from propertyhub.services.notification_dispatcher import NotificationDispatcher
from propertyhub.services.session_store import DatabaseSessionStore

logger = logging.getLogger(__name__)


async def session_cleanup_loop():
    """Purge expired sessions every hour."""
    max_age = timedelta(days=get_settings().session_max_age_days)
    while True:
        try:
            async with async_session() as db:
                await DatabaseSessionStore(db, max_age).purge_expired()
        except Exception as e:
            logger.error("Session cleanup error: %s", e)
        await asyncio.sleep(60 * 60)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: create tables and run the notification worker."""
    await init_db()

    dispatcher = NotificationDispatcher(maxsize=get_settings().notification_queue_size)
    dispatcher.start()
    app.state.notifications = dispatcher
    cleanup = asyncio.create_task(session_cleanup_loop(), name="session-cleanup")
    try:
        yield
    finally:
        cleanup.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await cleanup
        await dispatcher.stop()


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.debug else logging.WARNING,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

app = FastAPI(
    title="PropertyHub API",
    lifespan=lifespan,
    debug=settings.debug,
)

# Session cookies need credentialed CORS, so origins are always explicit
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Route includes
# ---------------------------------------------------------------------------
from propertyhub.app.routes.auth import router as auth_router
from propertyhub.app.routes.leads import router as leads_router
from propertyhub.app.routes.objects import router as objects_router
from propertyhub.app.routes.properties import router as properties_router

app.include_router(auth_router)
app.include_router(properties_router)
app.include_router(leads_router)
app.include_router(objects_router)

# Static file mount for directly uploaded images
_uploads_dir = Path(settings.uploads_dir)
_uploads_dir.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(_uploads_dir)), name="uploads")


@app.get("/health", tags=["health"])
async def health_check():
    """Return service health status."""
    return {"status": "ok", "service": "propertyhub"}


def run() -> None:
    """Run the application with uvicorn (used by project.scripts entry point)."""
    uvicorn.run(
        "propertyhub.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
