import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from palina.core.config import settings
from palina.core.exceptions import BookingNotFoundError, ValidationError
from palina.core.logging import setup_logging
from palina.core.rate_limiter import limiter
from palina.middleware.request_logger import RequestLoggerMiddleware

from palina.api.health import router as health_router
from palina.api.bookings import router as bookings_router
from palina.api.catalog import router as catalog_router
from palina.api.excel import router as excel_router
from palina.api.whatsapp import router as whatsapp_router


# -------------------------------------------------
# Logging
# -------------------------------------------------

setup_logging()
logger = logging.getLogger(__name__)


# -------------------------------------------------
# FastAPI
# -------------------------------------------------

app = FastAPI(
    title=f"{settings.resort_name} API",
    description="Bookings, spreadsheet export/import and WhatsApp notifications",
    version="1.0.0",
)

# -------------------------------------------------
# Rate Limiting (slowapi)
# -------------------------------------------------
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestLoggerMiddleware)


# -------------------------------------------------
# Domain errors
# -------------------------------------------------


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(BookingNotFoundError)
async def not_found_handler(request: Request, exc: BookingNotFoundError):
    return JSONResponse(status_code=404, content={"error": "Booking not found"})


app.include_router(health_router)
app.include_router(bookings_router)
app.include_router(catalog_router)
app.include_router(excel_router)
app.include_router(whatsapp_router)


# -------------------------------------------------
# Lifecycle
# -------------------------------------------------


@app.on_event("startup")
async def on_startup():
    logger.info("FastAPI startup")

    from palina.database import init_db

    await init_db()
    logger.info(f"🌴 {settings.resort_name} API ready")


@app.on_event("shutdown")
async def on_shutdown():
    logger.info("FastAPI shutdown")

    from palina.database import engine

    await engine.dispose()
