"""
Pydantic schemas for Settlement entity.
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from app.schemas.resolution import MismatchResolution
from app.schemas.standby import StandbyResponse


class SettleRequest(BaseModel):
    """Schema for settling two existing standbys against each other."""
    a_id: int
    b_id: int
    resolution: Optional[MismatchResolution] = None  # Defaults to "typo" (no annotation)


class NameCheckResponse(BaseModel):
    """Advisory result of comparing the names on both sides of a pair."""
    a_id: int
    b_id: int
    a_name: str
    b_name: str
    mismatch: bool


class SettlementResponse(BaseModel):
    """Schema for settlement response."""
    id: str
    three_way: bool
    created_at: datetime
    dissolved_at: Optional[datetime] = None
    members: List[StandbyResponse] = []
