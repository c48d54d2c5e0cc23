"""
Record store access for standby events.

Every query is scoped to the owner carried by the session context. Writes
only add or flush; committing is left to the service that owns the
operation so multi-record changes land in one transaction.
"""
import logging
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.context import SessionContext, require_context
from app.core.exceptions import NotFound, StoreError, ValidationError
from app.models.standby import StandbyEvent

logger = logging.getLogger(__name__)

ORDERABLE_COLUMNS = {
    "shift_date": StandbyEvent.shift_date,
    "settled_at": StandbyEvent.settled_at,
    "deleted_at": StandbyEvent.deleted_at,
    "created_at": StandbyEvent.created_at,
    "person_name": StandbyEvent.person_name,
}


@contextmanager
def store_guard(db: Session, action: str):
    """Roll back and raise StoreError when the database fails mid-operation."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Record store failure while {action}: {e}", exc_info=True)
        raise StoreError() from e


def _scoped(db: Session, ctx: SessionContext):
    return db.query(StandbyEvent).filter(StandbyEvent.user_id == ctx.user_id)


def list_events(
    db: Session,
    ctx: Optional[SessionContext],
    deleted: bool = False,
    settled: Optional[bool] = None,
    worked_for_me: Optional[bool] = None,
    date_after: Optional[date] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    order_by: str = "shift_date",
    ascending: bool = False,
) -> List[StandbyEvent]:
    """
    List the owner's standbys matching a filter.

    ``date_after`` is exclusive; ``date_from``/``date_to`` are inclusive.
    Without a session the record set is empty.
    """
    if ctx is None:
        return []
    column = ORDERABLE_COLUMNS.get(order_by)
    if column is None:
        raise ValidationError("order_by", f"Cannot order by '{order_by}'")

    query = _scoped(db, ctx)
    if deleted:
        query = query.filter(StandbyEvent.deleted_at.isnot(None))
    else:
        query = query.filter(StandbyEvent.deleted_at.is_(None))
    if settled is not None:
        query = query.filter(StandbyEvent.settled == settled)
    if worked_for_me is not None:
        query = query.filter(StandbyEvent.worked_for_me == worked_for_me)
    if date_after is not None:
        query = query.filter(StandbyEvent.shift_date > date_after)
    if date_from is not None:
        query = query.filter(StandbyEvent.shift_date >= date_from)
    if date_to is not None:
        query = query.filter(StandbyEvent.shift_date <= date_to)

    if ascending:
        query = query.order_by(column.asc(), StandbyEvent.id.asc())
    else:
        query = query.order_by(column.desc(), StandbyEvent.id.desc())

    with store_guard(db, "listing standbys"):
        return query.all()


def list_all(db: Session, ctx: Optional[SessionContext]) -> List[StandbyEvent]:
    """Every record the owner has, deleted ones included. Used for snapshots."""
    if ctx is None:
        return []
    with store_guard(db, "loading snapshot"):
        return _scoped(db, ctx).order_by(StandbyEvent.id.asc()).all()


def get_by_id(db: Session, ctx: Optional[SessionContext], event_id: int, fresh: bool = False) -> StandbyEvent:
    """
    Fetch one standby owned by the caller.

    ``fresh`` reloads the row from the database even if the session already
    holds it, so checks run against the current stored state.
    """
    ctx = require_context(ctx)
    query = _scoped(db, ctx).filter(StandbyEvent.id == event_id)
    if fresh:
        query = query.populate_existing()
    with store_guard(db, f"fetching standby {event_id}"):
        event = query.first()
    if event is None:
        raise NotFound(f"Standby {event_id} not found")
    return event


def list_group_members(
    db: Session,
    ctx: SessionContext,
    group_id: str,
    deleted: Optional[bool] = False,
) -> List[StandbyEvent]:
    """Records sharing a settlement group id. ``deleted=None`` returns both kinds."""
    query = _scoped(db, ctx).filter(StandbyEvent.settlement_group_id == group_id)
    if deleted is True:
        query = query.filter(StandbyEvent.deleted_at.isnot(None))
    elif deleted is False:
        query = query.filter(StandbyEvent.deleted_at.is_(None))
    with store_guard(db, f"loading settlement group {group_id}"):
        return query.populate_existing().order_by(StandbyEvent.shift_date.asc(), StandbyEvent.id.asc()).all()


def insert(db: Session, ctx: Optional[SessionContext], fields: Dict[str, Any]) -> StandbyEvent:
    """Add a new standby for the owner. The store assigns the id on flush."""
    ctx = require_context(ctx)
    event = StandbyEvent(user_id=ctx.user_id, **fields)
    with store_guard(db, "inserting standby"):
        db.add(event)
        db.flush()
    return event


def update(db: Session, ctx: Optional[SessionContext], event_id: int, fields: Dict[str, Any]) -> StandbyEvent:
    """Apply a partial update to one of the owner's standbys."""
    event = get_by_id(db, ctx, event_id)
    for key, value in fields.items():
        setattr(event, key, value)
    with store_guard(db, f"updating standby {event_id}"):
        db.flush()
    return event


def commit(db: Session, action: str, refresh: Iterable[Any] = ()) -> None:
    """Commit the current transaction and reload the given instances."""
    with store_guard(db, action):
        db.commit()
        for instance in refresh:
            db.refresh(instance)


def list_distinct_names(db: Session, ctx: Optional[SessionContext], limit: int) -> List[str]:
    """Counterparty names for autocomplete. Best effort: failures yield []."""
    if ctx is None:
        return []
    try:
        rows = (
            db.query(StandbyEvent.person_name)
            .filter(StandbyEvent.user_id == ctx.user_id, StandbyEvent.deleted_at.is_(None))
            .distinct()
            .order_by(StandbyEvent.person_name.asc())
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Name suggestions unavailable: {e}")
        return []
    return [row[0] for row in rows if row[0]]
