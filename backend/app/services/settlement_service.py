"""
Settlement service: pairing two standbys so they cancel each other out.

This module is the only place that writes ``settled``, ``settled_at`` and
``settlement_group_id``, and it always writes the three together.
"""
import logging
import uuid
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.context import SessionContext, require_context
from app.core.exceptions import LedgerError, NotFound, PartialFailure, SettleError, SettleFailure, ValidationError
from app.core.utils import append_note, normalize_name, utcnow
from app.models.settlement import Settlement
from app.models.standby import StandbyEvent
from app.schemas.resolution import MismatchResolution, OtherResolution, ThreeWayResolution, TypoResolution
from app.schemas.standby import StandbyCreate
from app.services import standby_service, standby_store
from app.services.projection_cache import PROJECTION_CACHE

logger = logging.getLogger(__name__)


def name_mismatch(a_name: Optional[str], b_name: Optional[str]) -> bool:
    """
    Advisory check before pairing: True when both names are present and
    differ after normalization. Never blocks a settlement by itself.
    """
    a = normalize_name(a_name)
    b = normalize_name(b_name)
    return bool(a and b and a != b)


def annotation_for(resolution: MismatchResolution) -> Optional[str]:
    """Note text a resolution appends to both sides of the pair."""
    if isinstance(resolution, ThreeWayResolution):
        return settings.THREE_WAY_MARKER
    if isinstance(resolution, OtherResolution):
        note = (resolution.note or "").strip()
        if not note:
            raise ValidationError("resolution.note", "Please describe the reason")
        return note
    return None


def annotate(records: Iterable[StandbyEvent], text: Optional[str], dedupe: bool = True) -> None:
    """Append ``text`` to each record's notes. User text is kept."""
    if not text:
        return
    for record in records:
        record.notes = append_note(record.notes, text, dedupe=dedupe)


def clear_settlement(record: StandbyEvent) -> None:
    record.settled = False
    record.settled_at = None
    record.settlement_group_id = None


def dissolve_settlement(
    db: Session,
    ctx: SessionContext,
    group_id: str,
    now: datetime,
    exclude_ids: Sequence[int] = (),
) -> List[StandbyEvent]:
    """
    Break a pair: every live member (except ``exclude_ids``) goes back to
    Active and the settlement is stamped as dissolved. Returns the members
    that were released. Does not commit.
    """
    db.flush()
    released = [
        member for member in standby_store.list_group_members(db, ctx, group_id, deleted=False)
        if member.id not in exclude_ids
    ]
    for member in released:
        clear_settlement(member)

    settlement = _find_settlement(db, ctx, group_id)
    if settlement is not None and settlement.dissolved_at is None:
        settlement.dissolved_at = now
    return released


def _find_settlement(db: Session, ctx: SessionContext, group_id: str) -> Optional[Settlement]:
    return db.query(Settlement).filter(
        Settlement.id == group_id,
        Settlement.user_id == ctx.user_id
    ).first()


def get_settlement(db: Session, ctx: Optional[SessionContext], group_id: str) -> Tuple[Settlement, List[StandbyEvent]]:
    """A settlement and every record still pointing at it."""
    ctx = require_context(ctx)
    with standby_store.store_guard(db, f"loading settlement {group_id}"):
        settlement = _find_settlement(db, ctx, group_id)
    if settlement is None:
        raise NotFound(f"Settlement {group_id} not found")
    members = standby_store.list_group_members(db, ctx, group_id, deleted=None)
    return settlement, members


def settle(
    db: Session,
    ctx: Optional[SessionContext],
    a_id: int,
    b_id: int,
    resolution: Optional[MismatchResolution] = None,
) -> Settlement:
    """
    Link two standbys into a settled pair.

    Both rows are re-read right before the write so a delete that landed
    after the user picked them is caught. Both rows, the settlement and any
    annotation are committed together.
    """
    ctx = require_context(ctx)
    if a_id == b_id:
        raise ValidationError("b_id", "A standby cannot settle itself")
    resolution = resolution or TypoResolution()
    note = annotation_for(resolution)

    a = standby_store.get_by_id(db, ctx, a_id, fresh=True)
    b = standby_store.get_by_id(db, ctx, b_id, fresh=True)

    deleted = [r.id for r in (a, b) if r.deleted_at is not None]
    if deleted:
        logger.warning(f"User {ctx.user_id} tried to settle {a_id} with {b_id}; standby {deleted[0]} is deleted")
        raise SettleError(SettleFailure.DELETED_MEMBER, f"Standby {deleted[0]} was deleted and cannot be settled")

    if a.worked_for_me == b.worked_for_me:
        logger.info(f"Settling standbys {a_id} and {b_id} that run in the same direction")

    now = utcnow()
    with standby_store.store_guard(db, f"settling {a_id} with {b_id}"):
        # A record can only sit in one pair; release any stale partner first
        for group_id in {r.settlement_group_id for r in (a, b) if r.settlement_group_id}:
            released = dissolve_settlement(db, ctx, group_id, now, exclude_ids=(a.id, b.id))
            logger.info(f"Dissolved settlement {group_id}, released {[r.id for r in released]}")

        settlement = Settlement(
            id=str(uuid.uuid4()),
            user_id=ctx.user_id,
            three_way=isinstance(resolution, ThreeWayResolution),
            created_at=now,
        )
        db.add(settlement)
        for record in (a, b):
            record.settlement_group_id = settlement.id
            record.settled = True
            record.settled_at = now
        # Only the three-way marker is deduplicated; a typed reason is always recorded
        annotate((a, b), note, dedupe=not isinstance(resolution, OtherResolution))

    standby_store.commit(db, f"settling {a_id} with {b_id}", refresh=[settlement, a, b])
    PROJECTION_CACHE.invalidate(ctx.user_id)

    logger.info(f"User {ctx.user_id} settled standbys {a_id} and {b_id} as {settlement.id} ({resolution.kind})")
    return settlement


def unsettle(db: Session, ctx: Optional[SessionContext], group_id: str) -> List[StandbyEvent]:
    """Return every live member of a pair to Active."""
    ctx = require_context(ctx)
    with standby_store.store_guard(db, f"unsettling {group_id}"):
        settlement = _find_settlement(db, ctx, group_id)
        members = standby_store.list_group_members(db, ctx, group_id, deleted=False)
        if settlement is None and not members:
            raise NotFound(f"Settlement {group_id} not found")
        released = dissolve_settlement(db, ctx, group_id, utcnow())

    standby_store.commit(db, f"unsettling {group_id}", refresh=released)
    PROJECTION_CACHE.invalidate(ctx.user_id)

    logger.info(f"User {ctx.user_id} unsettled {group_id}, released {[r.id for r in released]}")
    return released


def link_on_add(
    db: Session,
    ctx: Optional[SessionContext],
    data: StandbyCreate,
    existing_id: int,
    resolution: Optional[MismatchResolution] = None,
) -> Tuple[StandbyEvent, Settlement]:
    """
    Create a standby, then settle it against an existing one.

    The create is committed first. If the settle step fails the new record
    stays as an unsettled standby and PartialFailure reports both steps.
    """
    ctx = require_context(ctx)
    if resolution is not None:
        annotation_for(resolution)  # reject an empty "other" note before anything is written

    event = standby_service.create_event(db, ctx, data)
    try:
        settlement = settle(db, ctx, event.id, existing_id, resolution)
    except LedgerError as e:
        logger.warning(f"Standby {event.id} created but settling with {existing_id} failed: {e.message}")
        raise PartialFailure(
            "Added shift, but could not settle it",
            completed=[{"step": "create", "standby_id": event.id}],
            failed=[{"step": "settle", "standby_id": event.id, "with_id": existing_id, "reason": e.to_dict()}],
        ) from e
    return event, settlement


def settle_candidates(db: Session, ctx: Optional[SessionContext], event_id: int) -> List[StandbyEvent]:
    """Live, unsettled standbys running the opposite way, newest shift first."""
    ctx = require_context(ctx)
    event = standby_store.get_by_id(db, ctx, event_id)
    if event.deleted_at is not None:
        logger.debug(f"Standby {event_id} is deleted; no settle candidates")
        return []
    candidates = standby_store.list_events(
        db, ctx,
        deleted=False,
        settled=False,
        worked_for_me=not event.worked_for_me,
        order_by="shift_date",
        ascending=False,
    )
    return [c for c in candidates if c.id != event.id]
