"""
User model for authentication and record ownership.
"""
from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class User(BaseModel):
    """Account that owns a private set of standby records."""
    __tablename__ = "users"

    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    home_platoon = Column(String(50), nullable=True)  # Used to highlight the user's own platoon on the calendar

    # Relationships
    standbys = relationship("StandbyEvent", back_populates="owner")
    settlements = relationship("Settlement", back_populates="owner")
