# portal/main.py
import asyncio
import contextlib
import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from portal.api import attendance, auth
from portal.core.airtable import AirtableClient
from portal.core.config import Settings, get_settings
from portal.core.errors import ConfigError, PortalError
from portal.db.directory import StudentDirectory

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    client = AirtableClient(settings, transport=app.state.transport)
    directory = StudentDirectory(client, settings)

    # Nothing is served until the roster has loaded once
    try:
        await directory.refresh()
    except Exception:
        logger.exception("🔥 [Startup] Failed initial Airtable load")
        await client.aclose()
        raise

    app.state.airtable = client
    app.state.directory = directory
    refresher = asyncio.create_task(directory.run_periodic(settings.STUDENT_REFRESH_SECONDS))
    logger.info(
        f"🚀 [Startup] Student portal ready: attendance table '{settings.AIRTABLE_ATTENDANCE_TABLE}', "
        f"refresh every {settings.STUDENT_REFRESH_SECONDS}s, "
        f"staff override {'enabled' if settings.staff_override_enabled else 'disabled'}"
    )
    try:
        yield
    finally:
        refresher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await refresher
        await client.aclose()


async def portal_error_handler(request: Request, exc: PortalError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"🔥 [Server] Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Server error"})


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Application factory. Raises ConfigError when required settings are missing."""
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Student Portal API", lifespan=lifespan)
    app.state.settings = settings
    app.state.transport = transport

    # Open in dev; allow-list when ALLOWED_ORIGINS is set
    origins = settings.allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=bool(origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(attendance.router, prefix="/api/attendance", tags=["attendance"])

    @app.get("/api/health")
    def health(request: Request):
        directory = getattr(request.app.state, "directory", None)
        if directory is None:
            return {"status": "ok", "message": "Server is running", "students": 0, "loadedAt": None}
        return {
            "status": "ok",
            "message": "Server is running",
            "students": len(directory),
            "loadedAt": directory.loaded_at.isoformat() if directory.loaded_at else None,
        }

    return app


def run() -> None:
    import uvicorn

    try:
        settings = get_settings()
    except ConfigError as e:
        configure_logging()
        logger.error(f"❌ [Startup] {e.message}: {e.details}")
        raise SystemExit(1)
    uvicorn.run("portal.main:create_app", factory=True, host=settings.HOST, port=settings.PORT)
