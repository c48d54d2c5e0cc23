"""
Pydantic schemas for list projections and counters.
"""
from pydantic import BaseModel
from typing import List, Literal, Optional
from datetime import datetime
from app.schemas.standby import StandbyResponse


class PositionCounters(BaseModel):
    """Overall position: live unsettled shifts in each direction."""
    owed_to_me: int
    i_owe: int


class DashboardResponse(BaseModel):
    """Counters plus every active category for the signed-in user."""
    counters: PositionCounters
    owed_to_me: List[StandbyResponse]
    i_owe: List[StandbyResponse]
    upcoming_agreed: List[StandbyResponse]
    upcoming_requested: List[StandbyResponse]


class HistoryGroupResponse(BaseModel):
    """A settled/deleted pair, or a standalone record, in a history list."""
    group_id: str
    is_single: bool
    sort_key: Optional[datetime] = None
    records: List[StandbyResponse]


class HistoryResponse(BaseModel):
    """Grouped history view."""
    view: Literal["settled", "deleted"]
    total: int  # Number of records, not groups
    groups: List[HistoryGroupResponse]
