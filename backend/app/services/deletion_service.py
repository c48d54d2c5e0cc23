"""
Deletion service: soft delete, restore, and keeping pairs consistent.

A settled pair is only valid while both members are live, so deleting one
side always releases the other back to Active.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.context import SessionContext, require_context
from app.core.exceptions import NotFound
from app.core.utils import utcnow
from app.models.standby import StandbyEvent
from app.services import standby_store
from app.services.projection_cache import PROJECTION_CACHE
from app.services.settlement_service import clear_settlement, dissolve_settlement

logger = logging.getLogger(__name__)


def soft_delete(db: Session, ctx: Optional[SessionContext], event_id: int) -> StandbyEvent:
    """
    Mark a standby deleted. Deleting an already deleted record is a no-op.

    The deleted record keeps its own settlement fields so the deleted
    history can still show the pair; its live partner is released.
    """
    ctx = require_context(ctx)
    event = standby_store.get_by_id(db, ctx, event_id, fresh=True)
    if event.deleted_at is not None:
        logger.debug(f"Standby {event_id} already deleted")
        return event

    now = utcnow()
    released = []
    with standby_store.store_guard(db, f"deleting standby {event_id}"):
        event.deleted_at = now
        if event.settlement_group_id:
            released = dissolve_settlement(db, ctx, event.settlement_group_id, now, exclude_ids=(event.id,))

    standby_store.commit(db, f"deleting standby {event_id}", refresh=[event, *released])
    PROJECTION_CACHE.invalidate(ctx.user_id)

    if released:
        logger.info(f"User {ctx.user_id} deleted standby {event_id}; released partner(s) {[r.id for r in released]}")
    else:
        logger.info(f"User {ctx.user_id} deleted standby {event_id}")
    return event


def delete_pair(db: Session, ctx: Optional[SessionContext], group_id: str) -> List[StandbyEvent]:
    """Soft-delete every live member of a settlement in one step."""
    ctx = require_context(ctx)
    members = standby_store.list_group_members(db, ctx, group_id, deleted=False)
    if not members:
        raise NotFound(f"No live standbys in settlement {group_id}")

    now = utcnow()
    with standby_store.store_guard(db, f"deleting settlement {group_id}"):
        for member in members:
            member.deleted_at = now
        dissolve_settlement(db, ctx, group_id, now)

    standby_store.commit(db, f"deleting settlement {group_id}", refresh=members)
    PROJECTION_CACHE.invalidate(ctx.user_id)

    logger.info(f"User {ctx.user_id} deleted settlement {group_id} ({[m.id for m in members]})")
    return members


def _restore_record(event: StandbyEvent) -> None:
    # Restored records come back unsettled; the old partner may have moved on
    event.deleted_at = None
    clear_settlement(event)


def restore(db: Session, ctx: Optional[SessionContext], event_id: int) -> StandbyEvent:
    """Undo a soft delete. The record always lands Active, never re-settled."""
    ctx = require_context(ctx)
    event = standby_store.get_by_id(db, ctx, event_id, fresh=True)
    if event.deleted_at is None:
        logger.debug(f"Standby {event_id} is not deleted; nothing to restore")
        return event

    _restore_record(event)
    standby_store.commit(db, f"restoring standby {event_id}", refresh=[event])
    PROJECTION_CACHE.invalidate(ctx.user_id)

    logger.info(f"User {ctx.user_id} restored standby {event_id}")
    return event


def restore_pair(db: Session, ctx: Optional[SessionContext], group_id: str) -> List[StandbyEvent]:
    """Restore every deleted member still pointing at a settlement."""
    ctx = require_context(ctx)
    members = standby_store.list_group_members(db, ctx, group_id, deleted=True)
    if not members:
        raise NotFound(f"No deleted standbys in settlement {group_id}")

    for member in members:
        _restore_record(member)
    standby_store.commit(db, f"restoring settlement {group_id}", refresh=members)
    PROJECTION_CACHE.invalidate(ctx.user_id)

    logger.info(f"User {ctx.user_id} restored settlement {group_id} ({[m.id for m in members]})")
    return members
