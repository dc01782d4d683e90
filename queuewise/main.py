import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from queuewise.api.v1.auth import router as auth_router
from queuewise.api.v1.clinic import router as clinic_router
from queuewise.api.v1.invites import router as invites_router
from queuewise.api.v1.platform import router as platform_router
from queuewise.api.v1.public import router as public_router
from queuewise.api.v1.queue import router as queue_router
from queuewise.core.config import Settings, get_settings
from queuewise.core.db import build_engine, build_sessionmaker
from queuewise.core.errors import AppError, RateLimited, sanitize_error_message
from queuewise.core.logging import configure_logging
from queuewise.core.rate_limit import build_rate_limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s started (booking timezone %s)", app.title, app.state.settings.BOOKING_TIMEZONE)
    yield
    await app.state.rate_limiter.close()
    await app.state.engine.dispose()
    logger.info("%s stopped", app.title)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        headers = None
        if isinstance(exc, RateLimited):
            headers = {
                "Retry-After": str(exc.retry_after),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(exc.reset_at),
            }
        elif exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        content = {"ok": False, "error": exc.message}
        if app.state.settings.DEBUG:
            content["details"] = f"{type(exc).__name__}: {exc.message}"
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        content = {"ok": False, "error": "Invalid request data"}
        if app.state.settings.DEBUG:
            content["details"] = str(exc.errors())
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        debug = app.state.settings.DEBUG
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content = {"ok": False, "error": sanitize_error_message(exc, debug)}
        if debug:
            content["details"] = repr(exc)
        return JSONResponse(status_code=500, content=content)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.sessionmaker = build_sessionmaker(app.state.engine)
    app.state.rate_limiter = build_rate_limiter(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(public_router)
    app.include_router(queue_router)
    app.include_router(clinic_router)
    app.include_router(invites_router)
    app.include_router(platform_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
