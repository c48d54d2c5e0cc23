"""
Read-only projections: dashboard counters and grouped history.
"""
import logging
from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Literal, Optional
from app.db.session import get_db
from app.core.context import SessionContext
from app.schemas.views import DashboardResponse, PositionCounters, HistoryGroupResponse, HistoryResponse
from app.services import projection_service, standby_store
from app.services.projection_cache import PROJECTION_CACHE
from app.api.dependencies import get_session_context
from app.api.routes.standbys import build_standby_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/views", tags=["views"])


def empty_dashboard() -> DashboardResponse:
    return DashboardResponse(
        counters=PositionCounters(owed_to_me=0, i_owe=0),
        owed_to_me=[],
        i_owe=[],
        upcoming_agreed=[],
        upcoming_requested=[]
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    ctx: Optional[SessionContext] = Depends(get_session_context),
    db: Session = Depends(get_db)
):
    """Counters plus every active category. Served from cache until the next write."""
    if ctx is None:
        return empty_dashboard()

    today = date.today()
    cached = PROJECTION_CACHE.get(ctx.user_id, today)
    if cached is not None:
        logger.debug(f"Dashboard cache hit for user {ctx.user_id}")
        return cached

    records = standby_store.list_all(db, ctx)
    dashboard = projection_service.build_dashboard(records, today)

    def rows(items):
        return [build_standby_response(r, records, today) for r in items]

    response = DashboardResponse(
        counters=PositionCounters(
            owed_to_me=dashboard.counters.owed_to_me,
            i_owe=dashboard.counters.i_owe
        ),
        owed_to_me=rows(dashboard.owed_to_me),
        i_owe=rows(dashboard.i_owe),
        upcoming_agreed=rows(dashboard.upcoming_agreed),
        upcoming_requested=rows(dashboard.upcoming_requested)
    )
    PROJECTION_CACHE.put(ctx.user_id, today, response)
    return response


@router.get("/history/{view}", response_model=HistoryResponse)
async def get_history(
    view: Literal["settled", "deleted"],
    ctx: Optional[SessionContext] = Depends(get_session_context),
    db: Session = Depends(get_db)
):
    """Settled or deleted history, pairs grouped together, newest first."""
    today = date.today()
    records = standby_store.list_all(db, ctx)
    groups = projection_service.group_history(records, view)

    return HistoryResponse(
        view=view,
        total=sum(len(g.records) for g in groups),
        groups=[
            HistoryGroupResponse(
                group_id=g.group_id,
                is_single=g.is_single,
                sort_key=g.sort_key,
                records=[build_standby_response(r, records, today) for r in g.records]
            )
            for g in groups
        ]
    )
