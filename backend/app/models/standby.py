"""
Standby event model: one shift obligation between the owner and a counterparty.
"""
from sqlalchemy import Column, String, Date, DateTime, Boolean, Text, Enum as SQLEnum, ForeignKey, Integer
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class ShiftType(str, enum.Enum):
    """Shift type enumeration."""
    DAY = "Day"
    NIGHT = "Night"


class StandbyStatus(str, enum.Enum):
    """Display status derived from the settlement and deletion fields."""
    ACTIVE = "Active"
    SETTLED = "Settled"
    DELETED = "Deleted"


class StandbyEvent(BaseModel):
    """
    A claim that ``person_name`` worked (or will work) a shift for the owner,
    or the other way round.

    worked_for_me TRUE: the owner owes the counterparty a shift.
    worked_for_me FALSE: the counterparty owes the owner a shift.
    """
    __tablename__ = "standby_events"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    person_name = Column(String(120), nullable=False, index=True)
    platoon = Column(String(50), nullable=True)  # Counterparty's home platoon, display only
    duty_platoon = Column(String(50), nullable=True)  # Platoon rostered on for this shift
    shift_date = Column(Date, nullable=False, index=True)
    shift_type = Column(SQLEnum(ShiftType, values_callable=lambda e: [m.value for m in e]), nullable=False)
    worked_for_me = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    settled = Column(Boolean, nullable=False, default=False, index=True)
    settled_at = Column(DateTime, nullable=True)
    settlement_group_id = Column(String(36), ForeignKey("settlements.id"), nullable=True, index=True)
    deleted_at = Column(DateTime, nullable=True, index=True)

    # Relationships
    owner = relationship("User", back_populates="standbys")
    settlement = relationship("Settlement", back_populates="members")
