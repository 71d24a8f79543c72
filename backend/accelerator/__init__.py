import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from accelerator.config import Settings, settings
from accelerator.db import PersistenceError, init_all_stores

logger = logging.getLogger(__name__)


def create_app(cfg: Settings | None = None) -> FastAPI:
    cfg = cfg or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Learning Accelerator (%s)", cfg.environment)
        await init_all_stores(cfg)
        yield
        logger.info("Server closed")

    application = FastAPI(
        title="Learning Accelerator", version="0.1.0", lifespan=lifespan
    )
    application.state.settings = cfg

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    @application.exception_handler(PersistenceError)
    async def persistence_error(request: Request, exc: PersistenceError):
        logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc)
        body = {"error": "Storage failure"}
        if not cfg.is_production:
            body["details"] = str(exc)
        return JSONResponse(status_code=500, content=body)

    from accelerator.routers import health, lessons, progress, quiz

    application.include_router(health.router)
    application.include_router(lessons.router, prefix="/api", tags=["lessons"])
    application.include_router(progress.router, prefix="/api", tags=["progress"])
    application.include_router(quiz.router, prefix="/api/quiz", tags=["quiz"])

    return application


app = create_app()
