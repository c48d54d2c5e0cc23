"""
Standby management routes: add, edit, delete, restore and list.
"""
import logging
from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Iterable, List, Optional
from app.db.session import get_db
from app.core.config import settings
from app.core.context import SessionContext
from app.models.standby import StandbyEvent
from app.schemas.standby import StandbyCreate, StandbyUpdate, StandbyResponse, NarrativeResponse, NameSuggestions
from app.services import (
    deletion_service, narrative_service, projection_service,
    settlement_service, standby_service, standby_store
)
from app.api.dependencies import get_session_context, require_session, require_confirmation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/standbys", tags=["standbys"])

VIEWS = (
    projection_service.OWED_TO_ME,
    projection_service.I_OWE,
    projection_service.UPCOMING_AGREED,
    projection_service.UPCOMING_REQUESTED,
    projection_service.HISTORY_SETTLED,
    projection_service.HISTORY_DELETED,
)


def build_standby_response(
    event: StandbyEvent,
    snapshot: Iterable[StandbyEvent] = (),
    today: Optional[date] = None
) -> StandbyResponse:
    """Response row with status and narrative; the partner is looked up in ``snapshot``."""
    return StandbyResponse(
        id=event.id,
        person_name=event.person_name,
        platoon=event.platoon,
        duty_platoon=event.duty_platoon,
        shift_date=event.shift_date,
        shift_type=event.shift_type,
        worked_for_me=event.worked_for_me,
        notes=event.notes,
        settled=event.settled,
        settled_at=event.settled_at,
        settlement_group_id=event.settlement_group_id,
        deleted_at=event.deleted_at,
        status=standby_service.classify_status(event),
        narrative=narrative_service.narrative_in_snapshot(event, snapshot, today),
        created_at=event.created_at,
        updated_at=event.updated_at
    )


def build_with_partner(db: Session, ctx: SessionContext, event: StandbyEvent) -> StandbyResponse:
    """Response for a single record, loading its pair so the narrative can use it."""
    snapshot = []
    if event.settled and event.settlement_group_id:
        snapshot = standby_store.list_group_members(db, ctx, event.settlement_group_id, deleted=None)
    return build_standby_response(event, snapshot)


@router.get("", response_model=List[StandbyResponse])
async def list_standbys(
    view: str = Query(projection_service.OWED_TO_ME, description=f"One of: {', '.join(VIEWS)}"),
    search: Optional[str] = None,
    platoon: Optional[str] = None,
    sort: Optional[str] = Query(None, description=f"One of: {', '.join(projection_service.SORT_MODES)}"),
    ctx: Optional[SessionContext] = Depends(get_session_context),
    db: Session = Depends(get_db)
):
    """List one category of the signed-in user's standbys. Empty without a session."""
    today = date.today()
    records = standby_store.list_all(db, ctx)
    rows = projection_service.categorize(records, view, today)
    rows = projection_service.filter_rows(rows, search=search, platoon=platoon, sort=sort)
    return [build_standby_response(r, records, today) for r in rows]


@router.post("", response_model=StandbyResponse, status_code=status.HTTP_201_CREATED)
async def create_standby(
    standby_data: StandbyCreate,
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
):
    """
    Add a standby. With ``settle_with_id`` the new shift is settled against
    that existing one straight away.
    """
    if standby_data.settle_with_id is None:
        event = standby_service.create_event(db, ctx, standby_data)
        return build_standby_response(event)

    event, settlement = settlement_service.link_on_add(
        db, ctx, standby_data, standby_data.settle_with_id, standby_data.resolution
    )
    members = standby_store.list_group_members(db, ctx, settlement.id, deleted=None)
    return build_standby_response(event, members)


@router.get("/names", response_model=NameSuggestions)
async def suggest_names(
    ctx: Optional[SessionContext] = Depends(get_session_context),
    db: Session = Depends(get_db)
):
    """Distinct counterparty names for autocomplete."""
    return NameSuggestions(names=standby_store.list_distinct_names(db, ctx, settings.NAME_SUGGESTION_LIMIT))


@router.get("/platoons", response_model=List[str])
async def list_platoons(
    ctx: Optional[SessionContext] = Depends(get_session_context),
    db: Session = Depends(get_db)
):
    """Home platoons used on live standbys, for the filter dropdown."""
    return projection_service.platoon_options(standby_store.list_events(db, ctx, deleted=False))


@router.get("/{standby_id}", response_model=StandbyResponse)
async def get_standby(
    standby_id: int,
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Get one standby."""
    event = standby_store.get_by_id(db, ctx, standby_id)
    return build_with_partner(db, ctx, event)


@router.patch("/{standby_id}", response_model=StandbyResponse)
async def update_standby(
    standby_id: int,
    standby_data: StandbyUpdate,
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Edit a standby. The duty platoon is looked up again unless sent."""
    event = standby_service.edit_event(db, ctx, standby_id, standby_data)
    return build_with_partner(db, ctx, event)


@router.delete("/{standby_id}", response_model=StandbyResponse, dependencies=[Depends(require_confirmation)])
async def delete_standby(
    standby_id: int,
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Soft-delete a standby. A settled partner goes back to its active list."""
    event = deletion_service.soft_delete(db, ctx, standby_id)
    return build_standby_response(event)


@router.post("/{standby_id}/restore", response_model=StandbyResponse)
async def restore_standby(
    standby_id: int,
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Restore a deleted standby as an unsettled record."""
    event = deletion_service.restore(db, ctx, standby_id)
    return build_standby_response(event)


@router.get("/{standby_id}/candidates", response_model=List[StandbyResponse])
async def list_settle_candidates(
    standby_id: int,
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Existing standbys this one could be settled against."""
    today = date.today()
    return [build_standby_response(c, (), today) for c in settlement_service.settle_candidates(db, ctx, standby_id)]


@router.get("/{standby_id}/narrative", response_model=NarrativeResponse)
async def get_narrative(
    standby_id: int,
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Status sentence for one standby."""
    response = build_with_partner(db, ctx, standby_store.get_by_id(db, ctx, standby_id))
    return NarrativeResponse(id=response.id, status=response.status, narrative=response.narrative)
