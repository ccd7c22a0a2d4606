# interview_slots/schemas/slots.py
"""
Pydantic schemas for slots API.

Date/time strings are validated by the slot engine, not here, so that
errors come back tagged with the offending field.
"""

from typing import Any
from pydantic import BaseModel, Field


class SlotCreate(BaseModel):
    """Request body for booking a slot."""
    date: str = Field(description="Date in YYYY-MM-DD format")
    start_time: str = Field(description="Start time in HH:MM format")
    end_time: str = Field(description="End time in HH:MM format")
    metadata: dict[str, Any] | None = None


class SlotRead(BaseModel):
    id: str
    date: str
    start_time: str
    end_time: str
    duration: int
    notes: str | None = None
    metadata: dict[str, Any] | None = None

    model_config = {"from_attributes": True}


class TimeRangeRead(BaseModel):
    start_time: str
    end_time: str

    model_config = {"from_attributes": True}


class FreeWindowsResponse(BaseModel):
    """Free windows of a day inside [start_hour, end_hour)."""
    date: str
    start_hour: int
    end_hour: int
    windows: list[TimeRangeRead]
    available_minutes: int


class SlotConflictRead(BaseModel):
    slot1: SlotRead
    slot2: SlotRead
    overlap_minutes: int


class AvailabilityCheckResponse(BaseModel):
    date: str
    start_time: str
    end_time: str
    available: bool


class SlotsStatsResponse(BaseModel):
    date: str
    slot_count: int
    booked_minutes: int
    available_minutes: int
    slot_step_minutes: int = Field(description="Grid step in minutes (15/30/60)")


class SlotInfo(BaseModel):
    """One grid cell of a day."""
    slot_index: int
    time: str  # "HH:MM"
    is_available: bool


class SlotsGridResponse(BaseModel):
    date: str
    slots: list[SlotInfo]
    slots_per_day: int = Field(description="Number of cells in grid (96/48/24)")


class BookableChunk(BaseModel):
    start_time: str
    end_time: str


class BookableChunksResponse(BaseModel):
    """Availability block split into bookable chunks."""
    slot_id: str
    duration: int
    chunks: list[BookableChunk]


class DeleteResult(BaseModel):
    date: str
    deleted: int
