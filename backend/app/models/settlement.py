"""
Settlement model: the pair of standby events that cancel each other out.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import relationship
from app.db.base import Base


class Settlement(Base):
    """
    One settled pair. Member events point back here through
    ``settlement_group_id``; the settlement does not own them.
    """
    __tablename__ = "settlements"

    id = Column(String(36), primary_key=True)  # Random UUID, doubles as the group id
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    three_way = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    dissolved_at = Column(DateTime, nullable=True)  # Set when unsettled or broken by a delete

    # Relationships
    owner = relationship("User", back_populates="settlements")
    members = relationship("StandbyEvent", back_populates="settlement")
