"""
Pydantic schemas for the duty roster and calendar overlay.
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import date
from app.models.standby import ShiftType
from app.schemas.standby import StandbyResponse


class RosterDayItem(BaseModel):
    """Schema for one roster day."""
    date: date
    day_platoon: Optional[str] = None
    night_platoon: Optional[str] = None

    class Config:
        from_attributes = True


class RosterUpsertRequest(BaseModel):
    """Bulk roster upload."""
    days: List[RosterDayItem]


class RosterUpsertResponse(BaseModel):
    ok: bool
    count: int


class OnDutyResponse(BaseModel):
    """Platoon rostered on for a date and shift, if known."""
    date: date
    shift_type: ShiftType
    platoon: Optional[str] = None


class CalendarDay(BaseModel):
    """One cell of the month grid."""
    date: date
    in_month: bool
    day_platoon: Optional[str] = None
    night_platoon: Optional[str] = None
    home_on_day: bool = False
    home_on_night: bool = False
    standbys: List[StandbyResponse] = []


class CalendarResponse(BaseModel):
    """Sunday-first month grid with roster and the user's live standbys."""
    year: int
    month: int
    grid_start: date
    grid_end: date
    home_platoon: Optional[str] = None
    days: List[CalendarDay]
