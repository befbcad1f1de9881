import logging
from contextlib import asynccontextmanager
from pathlib import Path
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from task_api.common.access_log import AccessLogMiddleware
from task_api.common.exceptions import (
    ResourceNotFoundException,
    TaskStoreException,
    resource_not_found_handler,
    task_store_exception_handler,
    unexpected_exception_handler,
    validation_exception_handler,
    internal_error_response,
)
from task_api.common.logging_setup import setup_logging
from task_api.common.opentelemetry import setup_opentelemetry
from task_api.config import Settings, get_settings
from task_api.healthcheck.router import router as health_router
from task_api.tasks.router import router as tasks_router
from task_api.tasks.store.backend import get_task_store_backend

settings = get_settings()

setup_logging(settings)

logger = logging.getLogger(__name__)


def create_app(settings: Settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.task_store = get_task_store_backend(settings)
        logger.info(f"Using {settings.TASK_STORE_BACKEND} task store")
        yield
        app.state.task_store.close()

    app = FastAPI(
        title=settings.API_NAME,
        summary=settings.API_SUMMARY,
        lifespan=lifespan,
        responses={**internal_error_response},
        version=settings.API_VERSION,
    )

    if settings.OTEL_ENABLED:
        setup_opentelemetry(settings, app)

    if settings.CORS_ENABLED:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_middleware(AccessLogMiddleware)

    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(ResourceNotFoundException)(resource_not_found_handler)
    app.exception_handler(TaskStoreException)(task_store_exception_handler)
    app.exception_handler(Exception)(unexpected_exception_handler)

    app.include_router(health_router)
    app.include_router(tasks_router)

    # Mounted last so the API routes take precedence over files at "/"
    if Path(settings.STATIC_DIR).is_dir():
        app.mount(
            "/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static"
        )

    return app


app = create_app(settings)


def run() -> None:
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
