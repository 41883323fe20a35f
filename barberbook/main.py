# barberbook/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from barberbook.config import LOG_LEVEL
from barberbook.db import create_db_and_tables
from barberbook.errors import BookingError
from barberbook.logging_config import RequestIDMiddleware, get_logger, setup_structured_logging
from barberbook.routers import appointments_routes, auth_routes, shops_routes, users_routes

setup_structured_logging(LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("startup")
    yield


app = FastAPI(title="barberbook", lifespan=lifespan)
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.kind)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind},
    )


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(shops_routes.router)
app.include_router(appointments_routes.router)
