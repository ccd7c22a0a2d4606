import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .config import settings
from .routers import slots
from .services.slots import (
    SlotConflictError,
    SlotNotFoundError,
    SlotOwnerRequiredError,
    SlotValidationError,
)
from .services.slots.helpers import slot_to_api_response

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.slot_storage == "orm":
        from .database import init_db
        init_db()
    logger.info(f"Slots API started, storage={settings.slot_storage}")
    yield


app = FastAPI(title="Interview Slots API", lifespan=lifespan)
app.include_router(slots.router)


@app.exception_handler(SlotValidationError)
async def slot_validation_handler(request: Request, exc: SlotValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "field": exc.field},
    )


@app.exception_handler(SlotConflictError)
async def slot_conflict_handler(request: Request, exc: SlotConflictError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": exc.message,
            "conflicts": [slot_to_api_response(s) for s in exc.conflicting_slots],
        },
    )


@app.exception_handler(SlotOwnerRequiredError)
async def slot_owner_required_handler(request: Request, exc: SlotOwnerRequiredError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "field": "interviewer_id"},
    )


@app.exception_handler(SlotNotFoundError)
async def slot_not_found_handler(request: Request, exc: SlotNotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


@app.get("/health")
def health():
    return {"status": "ok", "storage": settings.slot_storage}
