import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .database import init_db
from .routers import appointments, schedule, slots
from .services.errors import BookingError
from .services.reminder_checker import reminder_checker_loop

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()

    reminder_task = None
    if settings.reminder_enabled:
        reminder_task = asyncio.create_task(reminder_checker_loop())

    yield

    if reminder_task is not None:
        reminder_task.cancel()
        try:
            await reminder_task
        except asyncio.CancelledError:
            pass


app = FastAPI(title="CareSlot Booking API", lifespan=lifespan)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


app.include_router(schedule.router)
app.include_router(slots.router)
app.include_router(appointments.router)


@app.get("/health")
def health():
    from .redis_client import redis_client

    try:
        redis_ok = redis_client.ping()
    except Exception as e:
        logger.warning(f"Redis health check failed: {e}")
        redis_ok = False
    return {"redis": redis_ok}
