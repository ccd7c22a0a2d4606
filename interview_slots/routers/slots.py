# interview_slots/routers/slots.py
"""
Slots API endpoints (interviewer availability).

Every endpoint takes an optional interviewer_id: one SlotManager per
interviewer scope. Engine errors are turned into HTTP responses by the
handlers in main.py (400 validation / 409 conflict / 404 not found).
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ..schemas.slots import (
    AvailabilityCheckResponse,
    BookableChunk,
    BookableChunksResponse,
    DeleteResult,
    FreeWindowsResponse,
    SlotConflictRead,
    SlotCreate,
    SlotInfo,
    SlotRead,
    SlotsGridResponse,
    SlotsStatsResponse,
    TimeRangeRead,
)
from ..services.slots import (
    AvailabilityOptions,
    CreateSlotInput,
    QueryOptions,
    Slot,
    SlotManager,
)
from ..services.slots.helpers import (
    generate_bookable_slots,
    generate_time_slots,
    get_slot_manager,
    get_time_slot_index,
    slot_to_api_response,
)


router = APIRouter(prefix="/slots", tags=["slots"])


def get_manager(interviewer_id: int | None = Query(None, gt=0)) -> SlotManager:
    return get_slot_manager(interviewer_id)


def _to_read(slot: Slot) -> SlotRead:
    return SlotRead(**slot_to_api_response(slot), metadata=slot.metadata)


def _to_input(data: SlotCreate) -> CreateSlotInput:
    return CreateSlotInput(
        date=data.date,
        start_time=data.start_time,
        end_time=data.end_time,
        metadata=data.metadata,
    )


def _availability_options(
    start_hour: int, end_hour: int, min_duration_intervals: int
) -> AvailabilityOptions:
    return AvailabilityOptions(
        start_hour=start_hour,
        end_hour=end_hour,
        min_duration_intervals=min_duration_intervals,
    )


# ── Booking ──────────────────────────────────────────────────────────────


@router.post("", response_model=SlotRead, status_code=status.HTTP_201_CREATED)
async def book_slot(data: SlotCreate, manager: SlotManager = Depends(get_manager)):
    slot = await manager.book(_to_input(data))
    return _to_read(slot)


@router.post("/batch", response_model=list[SlotRead], status_code=status.HTTP_201_CREATED)
async def book_slots(data: list[SlotCreate], manager: SlotManager = Depends(get_manager)):
    """Book several slots: all or nothing."""
    slots = await manager.book_many([_to_input(item) for item in data])
    return [_to_read(s) for s in slots]


# ── Queries ──────────────────────────────────────────────────────────────


@router.get("", response_model=list[SlotRead])
async def list_slots(
    date: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    limit: int | None = Query(None, ge=1),
    offset: int | None = Query(None, ge=0),
    manager: SlotManager = Depends(get_manager),
):
    """Slots of one date, of a date range, or a paginated listing."""
    if date:
        slots = await manager.get_by_date(date)
    elif start_date and end_date and limit is None and offset is None:
        slots = await manager.get_by_date_range(start_date, end_date)
    else:
        slots = await manager.get_all(QueryOptions(
            start_date=start_date,
            end_date=end_date,
            limit=limit,
            offset=offset,
        ))
    return [_to_read(s) for s in slots]


@router.get("/free", response_model=FreeWindowsResponse)
async def get_free_windows(
    date: str,
    start_hour: int = 0,
    end_hour: int = 24,
    min_duration_intervals: int = 1,
    manager: SlotManager = Depends(get_manager),
):
    options = _availability_options(start_hour, end_hour, min_duration_intervals)
    try:
        windows = await manager.get_available_slots(date, options)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    interval = manager.config.interval_minutes
    available_minutes = sum(
        (manager.config.time_to_index(w.end_time) - manager.config.time_to_index(w.start_time)) * interval
        for w in windows
    )

    return FreeWindowsResponse(
        date=date.strip(),
        start_hour=start_hour,
        end_hour=end_hour,
        windows=[TimeRangeRead(start_time=w.start_time, end_time=w.end_time) for w in windows],
        available_minutes=available_minutes,
    )


@router.get("/availability", response_model=AvailabilityCheckResponse)
async def check_availability(
    date: str,
    start_time: str,
    end_time: str,
    manager: SlotManager = Depends(get_manager),
):
    """Pre-check before booking: False for invalid input or any conflict."""
    available = await manager.is_available(date, start_time, end_time)
    return AvailabilityCheckResponse(
        date=date,
        start_time=start_time,
        end_time=end_time,
        available=available,
    )


@router.get("/conflicts", response_model=list[SlotConflictRead])
async def list_conflicts(date: str, manager: SlotManager = Depends(get_manager)):
    """Audit: overlapping pairs already stored on date."""
    conflicts = await manager.find_conflicts(date)
    return [
        SlotConflictRead(
            slot1=_to_read(c.slot1),
            slot2=_to_read(c.slot2),
            overlap_minutes=c.overlap_minutes,
        )
        for c in conflicts
    ]


@router.get("/stats", response_model=SlotsStatsResponse)
async def get_day_stats(
    date: str,
    start_hour: int = 0,
    end_hour: int = 24,
    manager: SlotManager = Depends(get_manager),
):
    options = _availability_options(start_hour, end_hour, 1)
    try:
        available_minutes = await manager.get_available_minutes(date, options)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SlotsStatsResponse(
        date=date.strip(),
        slot_count=await manager.count(date),
        booked_minutes=await manager.get_booked_minutes(date),
        available_minutes=available_minutes,
        slot_step_minutes=manager.config.interval_minutes,
    )


@router.get("/grid", response_model=SlotsGridResponse)
async def get_day_grid(date: str, manager: SlotManager = Depends(get_manager)):
    """Day grid: one cell per interval, free or occupied (admin/debug endpoint)."""
    interval = manager.config.interval_minutes
    slots = await manager.get_by_date(date)

    occupied: set[int] = set()
    for slot in slots:
        start = get_time_slot_index(slot.start_time, interval)
        end = get_time_slot_index(slot.end_time, interval)
        occupied.update(range(start, end))

    cells = [
        SlotInfo(slot_index=i, time=time_str, is_available=i not in occupied)
        for i, time_str in enumerate(generate_time_slots(interval))
    ]
    return SlotsGridResponse(
        date=date.strip(),
        slots=cells,
        slots_per_day=manager.config.intervals_per_day,
    )


@router.get("/{slot_id}", response_model=SlotRead)
async def get_slot(slot_id: str, manager: SlotManager = Depends(get_manager)):
    return _to_read(await manager.get_or_throw(slot_id))


@router.get("/{slot_id}/bookable", response_model=BookableChunksResponse)
async def get_bookable_chunks(
    slot_id: str,
    duration: int | None = Query(None, ge=1, le=480),
    manager: SlotManager = Depends(get_manager),
):
    """Split an availability block into bookable chunks of `duration` minutes."""
    slot = await manager.get_or_throw(slot_id)
    chunk_minutes = duration or slot_to_api_response(slot)["duration"]
    chunks = generate_bookable_slots(slot.start_time, slot.end_time, chunk_minutes)
    return BookableChunksResponse(
        slot_id=slot.id,
        duration=chunk_minutes,
        chunks=[BookableChunk(start_time=s, end_time=e) for s, e in chunks],
    )


# ── Cancel ───────────────────────────────────────────────────────────────


@router.delete("/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_slot(slot_id: str, manager: SlotManager = Depends(get_manager)):
    await manager.cancel_or_throw(slot_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("", response_model=DeleteResult)
async def cancel_day(date: str, manager: SlotManager = Depends(get_manager)):
    deleted = await manager.cancel_by_date(date)
    return DeleteResult(date=date.strip(), deleted=deleted)
