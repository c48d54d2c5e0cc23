"""
Roster model: which platoon is on duty for each day and night shift.
"""
from sqlalchemy import Column, String, Date
from app.db.base import BaseModel


class RosterDay(BaseModel):
    """One calendar day of the shared duty roster."""
    __tablename__ = "roster_days"

    date = Column(Date, unique=True, nullable=False, index=True)
    day_platoon = Column(String(50), nullable=True)
    night_platoon = Column(String(50), nullable=True)
