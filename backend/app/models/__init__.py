"""Models package - Import all models for SQLAlchemy registration."""
from app.models.user import User
from app.models.standby import StandbyEvent, ShiftType, StandbyStatus
from app.models.settlement import Settlement
from app.models.roster import RosterDay

__all__ = [
    "User",
    "StandbyEvent",
    "ShiftType",
    "StandbyStatus",
    "Settlement",
    "RosterDay",
]
