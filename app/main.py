import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings
from app.core.errors import DomainError, ValidationError
from app.core.logging import setup_logging
from app.database import Base, SessionLocal, engine
from app.models import import_all_models
from app.routers import (
    dropdowns_router,
    health_router,
    products_router,
    references_router,
)
from app.services.seed_service import seed_reference_data

setup_logging()
settings: Settings = get_settings()
logger = logging.getLogger(__name__)


def init_database() -> None:
    import_all_models()
    Base.metadata.create_all(bind=engine)
    if not settings.SEED_REFERENCE_DATA:
        return
    db = SessionLocal()
    try:
        seed_reference_data(db)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_database()
    logger.info("%s started (%s)", settings.APP_NAME, settings.ENVIRONMENT)
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
    logger.info(
        "%s %s -> %s",
        request.method,
        request.url.path,
        response.status_code,
        extra={"duration_ms": elapsed_ms, "status_code": response.status_code},
    )
    return response


# ==============================
# Exception handlers
# ==============================

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "errors": exc.errors},
    )


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def _field_name(location) -> str:
    parts = [str(part) for part in location if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": _field_name(error.get("loc", ())), "message": error.get("msg", "Invalid value")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"detail": "Request validation failed.", "errors": errors},
    )


app.include_router(health_router)
app.include_router(dropdowns_router)
app.include_router(products_router)
app.include_router(references_router)


__all__ = ["app", "init_database"]
