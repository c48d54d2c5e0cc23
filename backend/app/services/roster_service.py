"""
Roster lookups: which platoon is on duty for a date and shift.

Lookups are a convenience for auto-filling ``duty_platoon``; a failure is
logged and treated as "unknown", never as an error on the write path.
"""
import calendar
import logging
from datetime import date, timedelta
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from app.models.roster import RosterDay
from app.models.standby import ShiftType
from app.schemas.roster import RosterDayItem
from app.services.standby_store import store_guard

logger = logging.getLogger(__name__)


def platoon_on_duty(db: Session, shift_date: Optional[date], shift_type: Optional[ShiftType]) -> Optional[str]:
    """Platoon rostered on for the shift, or None if unknown."""
    if shift_date is None or shift_type is None:
        return None
    try:
        row = db.query(RosterDay).filter(RosterDay.date == shift_date).first()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Roster lookup failed for {shift_date} {shift_type.value}: {e}")
        return None
    if row is None:
        logger.debug(f"No roster entry for {shift_date}")
        return None
    platoon = row.night_platoon if shift_type == ShiftType.NIGHT else row.day_platoon
    return platoon.strip() if platoon and platoon.strip() else None


def roster_range(db: Session, start: date, end: date) -> List[RosterDay]:
    """Roster rows between two dates inclusive, oldest first."""
    if end < start:
        raise ValidationError("end", "End date must not be before start date")
    try:
        return (
            db.query(RosterDay)
            .filter(RosterDay.date >= start, RosterDay.date <= end)
            .order_by(RosterDay.date.asc())
            .all()
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Roster range {start}..{end} unavailable: {e}")
        return []


def upsert_roster(db: Session, days: List[RosterDayItem]) -> int:
    """Insert or replace roster days keyed by date. Returns the number written."""
    if not days:
        raise ValidationError("days", "No roster days provided")

    with store_guard(db, "updating roster"):
        dates = [d.date for d in days]
        existing = {
            row.date: row
            for row in db.query(RosterDay).filter(RosterDay.date.in_(dates)).all()
        }
        for item in days:
            row = existing.get(item.date)
            if row is None:
                row = RosterDay(date=item.date)
                db.add(row)
                existing[item.date] = row
            row.day_platoon = (item.day_platoon or "").strip() or None
            row.night_platoon = (item.night_platoon or "").strip() or None
        db.commit()

    logger.info(f"Roster updated for {len(existing)} day(s)")
    return len(existing)


def month_grid(year: int, month: int) -> Tuple[date, date, List[date]]:
    """
    Sunday-first grid of full weeks covering a month.

    Returns (grid_start, grid_end, every day in between).
    """
    if not 1 <= month <= 12:
        raise ValidationError("month", "Month must be between 1 and 12")
    if not 1900 <= year <= 9998:
        raise ValidationError("year", "Year out of range")

    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])

    # date.weekday(): Monday=0 ... Sunday=6
    grid_start = first - timedelta(days=(first.weekday() + 1) % 7)
    grid_end = last + timedelta(days=6 - (last.weekday() + 1) % 7)

    days = []
    current = grid_start
    while current <= grid_end:
        days.append(current)
        current += timedelta(days=1)
    return grid_start, grid_end, days
