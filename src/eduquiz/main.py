"""FastAPI application entrypoint for EduQuiz rewards."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .api.v1.router import api_router
from .api.v1.vouchers import REDEEM_ROUTE_NAME
from .core.cache import build_cache
from .core.config import get_settings
from .core.database import init_db
from .core.logging import setup_logging
from .core.rate_limit import limiter
from .jobs import shutdown_scheduler, start_scheduler
from .schemas import RedemptionErrorBody
from .services.errors import RedemptionError, RedemptionErrorCode

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_db()
    if settings.enable_scheduler:
        start_scheduler()
    yield
    shutdown_scheduler()
    app.state.cache.close()


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report unusable redemption payloads as ``INVALID_REQUEST``; other routes keep FastAPI's 422."""

    if request.url.path != request.app.url_path_for(REDEEM_ROUTE_NAME):
        return await request_validation_exception_handler(request, exc)

    logger.info("redemption rejected reason=INVALID_REQUEST errors=%s", exc.errors())
    error = RedemptionError(RedemptionErrorCode.INVALID_REQUEST)
    body = RedemptionErrorBody(error=error.code.value, message=error.detail)
    return JSONResponse(status_code=error.status_code, content={"detail": body.model_dump()})


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="EduQuiz Rewards API", version="0.1.0", lifespan=lifespan)
    app.state.cache = build_cache(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
