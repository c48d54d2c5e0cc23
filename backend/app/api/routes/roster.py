"""
Duty roster routes.
"""
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.core.context import SessionContext
from app.schemas.roster import RosterDayItem, RosterUpsertRequest, RosterUpsertResponse, OnDutyResponse
from app.services import roster_service, standby_service
from app.api.dependencies import require_session

router = APIRouter(prefix="/roster", tags=["roster"])


@router.get("/on-duty", response_model=OnDutyResponse)
async def get_on_duty(
    shift_date: date = Query(..., alias="date"),
    shift_type: str = Query(...),
    db: Session = Depends(get_db)
):
    """Platoon rostered on for a date and shift. ``platoon`` is null when unknown."""
    parsed = standby_service.parse_shift_type(shift_type)
    return OnDutyResponse(
        date=shift_date,
        shift_type=parsed,
        platoon=roster_service.platoon_on_duty(db, shift_date, parsed)
    )


@router.get("/range", response_model=List[RosterDayItem])
async def get_roster_range(
    start: date,
    end: date,
    db: Session = Depends(get_db)
):
    """Roster days between two dates inclusive."""
    return roster_service.roster_range(db, start, end)


@router.put("", response_model=RosterUpsertResponse)
async def upsert_roster(
    request: RosterUpsertRequest,
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Bulk insert or replace roster days."""
    count = roster_service.upsert_roster(db, request.days)
    return RosterUpsertResponse(ok=True, count=count)
