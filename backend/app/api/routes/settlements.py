"""
Settlement routes: pairing, unpairing and pair-level delete/restore.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.core.context import SessionContext
from app.models.settlement import Settlement
from app.models.standby import StandbyEvent
from app.schemas.standby import StandbyResponse
from app.schemas.settlement import SettleRequest, SettlementResponse, NameCheckResponse
from app.services import deletion_service, settlement_service, standby_store
from app.api.dependencies import require_session, require_confirmation
from app.api.routes.standbys import build_standby_response

router = APIRouter(prefix="/settlements", tags=["settlements"])


def build_settlement_response(settlement: Settlement, members: List[StandbyEvent]) -> SettlementResponse:
    return SettlementResponse(
        id=settlement.id,
        three_way=settlement.three_way,
        created_at=settlement.created_at,
        dissolved_at=settlement.dissolved_at,
        members=[build_standby_response(m, members) for m in members]
    )


@router.post("", response_model=SettlementResponse, status_code=status.HTTP_201_CREATED)
async def settle_standbys(
    request: SettleRequest,
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Settle two existing standbys against each other."""
    settlement = settlement_service.settle(db, ctx, request.a_id, request.b_id, request.resolution)
    members = standby_store.list_group_members(db, ctx, settlement.id, deleted=None)
    return build_settlement_response(settlement, members)


@router.get("/name-check", response_model=NameCheckResponse)
async def check_names(
    a_id: int = Query(...),
    b_id: int = Query(...),
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Compare the names on both sides before settling. Advisory only."""
    a = standby_store.get_by_id(db, ctx, a_id)
    b = standby_store.get_by_id(db, ctx, b_id)
    return NameCheckResponse(
        a_id=a.id,
        b_id=b.id,
        a_name=a.person_name,
        b_name=b.person_name,
        mismatch=settlement_service.name_mismatch(a.person_name, b.person_name)
    )


@router.get("/{group_id}", response_model=SettlementResponse)
async def get_settlement(
    group_id: str,
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Get a settlement with the records still pointing at it."""
    settlement, members = settlement_service.get_settlement(db, ctx, group_id)
    return build_settlement_response(settlement, members)


@router.post("/{group_id}/unsettle", response_model=List[StandbyResponse], dependencies=[Depends(require_confirmation)])
async def unsettle(
    group_id: str,
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Break a pair; both records go back to their active lists."""
    released = settlement_service.unsettle(db, ctx, group_id)
    return [build_standby_response(r) for r in released]


@router.post("/{group_id}/delete", response_model=List[StandbyResponse], dependencies=[Depends(require_confirmation)])
async def delete_pair(
    group_id: str,
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Soft-delete both members of a pair."""
    members = deletion_service.delete_pair(db, ctx, group_id)
    return [build_standby_response(m) for m in members]


@router.post("/{group_id}/restore", response_model=List[StandbyResponse])
async def restore_pair(
    group_id: str,
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Restore both members of a deleted pair as unsettled records."""
    members = deletion_service.restore_pair(db, ctx, group_id)
    return [build_standby_response(m) for m in members]
