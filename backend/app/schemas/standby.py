"""
Pydantic schemas for StandbyEvent entity.
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import date, datetime
from app.models.standby import ShiftType, StandbyStatus
from app.schemas.resolution import MismatchResolution


class StandbyBase(BaseModel):
    """Fields the user enters on the add/edit form."""
    person_name: str
    platoon: Optional[str] = None  # Counterparty's home platoon
    shift_date: date
    shift_type: ShiftType
    worked_for_me: bool = False
    notes: Optional[str] = None


class StandbyCreate(BaseModel):
    """
    Schema for standby creation.

    Required fields are validated by the service so a missing value comes
    back naming the field instead of failing deserialization.
    """
    person_name: Optional[str] = None
    platoon: Optional[str] = None
    duty_platoon: Optional[str] = None  # Manual override; looked up from the roster when empty
    shift_date: Optional[date] = None
    shift_type: Optional[ShiftType] = None
    worked_for_me: bool = False
    notes: Optional[str] = None
    settle_with_id: Optional[int] = None  # Settle the new shift against this existing one
    resolution: Optional[MismatchResolution] = None  # Required by clients when names differ


class StandbyUpdate(BaseModel):
    """Schema for standby update. Only fields that are sent are changed."""
    person_name: Optional[str] = None
    platoon: Optional[str] = None
    duty_platoon: Optional[str] = None
    shift_date: Optional[date] = None
    shift_type: Optional[ShiftType] = None
    worked_for_me: Optional[bool] = None
    notes: Optional[str] = None


class StandbyResponse(StandbyBase):
    """Schema for standby response."""
    id: int
    duty_platoon: Optional[str] = None
    settled: bool
    settled_at: Optional[datetime] = None
    settlement_group_id: Optional[str] = None
    deleted_at: Optional[datetime] = None
    status: StandbyStatus
    narrative: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class NarrativeResponse(BaseModel):
    """Status sentence for one standby."""
    id: int
    status: StandbyStatus
    narrative: str


class NameSuggestions(BaseModel):
    """Distinct counterparty names for autocomplete."""
    names: List[str]
