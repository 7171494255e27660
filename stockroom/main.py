# stockroom/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from stockroom.core import logging_config  # noqa: F401 - configures logging on import
from stockroom.core.config import get_settings
from stockroom.routes import health, stock
from stockroom.scheduler import start_scheduler, stop_scheduler

from stockroom import models  # noqa: F401 - registers models with Base.metadata


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if settings.SWEEP_SCHEDULE_ENABLED:
        await start_scheduler(settings)
    try:
        yield  # This is where the app runs
    finally:
        await stop_scheduler()

app = FastAPI(
    title="Stock Replenishment Service",
    debug=get_settings().DEBUG,
    lifespan=lifespan
)

# Add middleware to handle HTTPS behind proxy
@app.middleware("http")
async def proxy_headers_middleware(request: Request, call_next):
    forwarded_proto = request.headers.get("x-forwarded-proto")
    if forwarded_proto == "https":
        request.scope["scheme"] = "https"
    response = await call_next(request)
    return response

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Handlers sit outside Depends, so honour any get_settings override by hand
    settings_provider = request.app.dependency_overrides.get(get_settings, get_settings)
    return stock.validation_error_response(exc, settings_provider())

app.include_router(stock.router)
app.include_router(health.router)
