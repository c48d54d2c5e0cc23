"""
Calendar routes: month grid with roster and standby overlay.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from datetime import date
from app.db.session import get_db
from app.core.context import SessionContext
from app.core.utils import collapse_whitespace
from app.models.standby import StandbyEvent
from app.models.user import User
from app.schemas.roster import CalendarDay, CalendarResponse
from app.services import roster_service, standby_store
from app.api.dependencies import get_session_context
from app.api.routes.standbys import build_standby_response

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("/{year}/{month}", response_model=CalendarResponse)
async def get_month(
    year: int,
    month: int,
    ctx: Optional[SessionContext] = Depends(get_session_context),
    db: Session = Depends(get_db)
):
    """
    Month view for the calendar screen.

    Covers whole Sunday-first weeks, so leading and trailing days of the
    neighbouring months are included with ``in_month`` false. The user's
    home platoon is flagged on days it is rostered on.
    """
    grid_start, grid_end, days = roster_service.month_grid(year, month)

    roster = {row.date: row for row in roster_service.roster_range(db, grid_start, grid_end)}

    events = standby_store.list_events(
        db, ctx,
        deleted=False,
        date_from=grid_start,
        date_to=grid_end,
        order_by="shift_date",
        ascending=True
    )
    by_date: Dict[date, List[StandbyEvent]] = {}
    for event in events:
        by_date.setdefault(event.shift_date, []).append(event)

    home_platoon = None
    if ctx is not None:
        user = db.query(User).filter(User.id == ctx.user_id).first()
        home_platoon = collapse_whitespace(user.home_platoon if user else None) or None

    def is_home(platoon: Optional[str]) -> bool:
        return bool(home_platoon and platoon and collapse_whitespace(platoon).lower() == home_platoon.lower())

    cells = []
    for day in days:
        row = roster.get(day)
        day_platoon = row.day_platoon if row else None
        night_platoon = row.night_platoon if row else None
        cells.append(CalendarDay(
            date=day,
            in_month=day.month == month,
            day_platoon=day_platoon,
            night_platoon=night_platoon,
            home_on_day=is_home(day_platoon),
            home_on_night=is_home(night_platoon),
            standbys=[build_standby_response(e, events) for e in by_date.get(day, [])]
        ))

    return CalendarResponse(
        year=year,
        month=month,
        grid_start=grid_start,
        grid_end=grid_end,
        home_platoon=home_platoon,
        days=cells
    )
