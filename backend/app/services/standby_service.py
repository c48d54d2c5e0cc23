"""
Standby service: record shape rules, validation and the add/edit intents.
"""
import logging
from datetime import date
from typing import Optional, Tuple, Union

from sqlalchemy.orm import Session

from app.core.context import SessionContext, require_context
from app.core.exceptions import ValidationError
from app.core.utils import collapse_whitespace, to_title_case
from app.models.standby import ShiftType, StandbyEvent, StandbyStatus
from app.schemas.standby import StandbyCreate, StandbyUpdate
from app.services import roster_service, standby_store
from app.services.projection_cache import PROJECTION_CACHE

logger = logging.getLogger(__name__)


def classify_status(record: StandbyEvent) -> StandbyStatus:
    """Deleted wins over Settled; everything else is Active."""
    if record.deleted_at is not None:
        return StandbyStatus.DELETED
    if record.settled:
        return StandbyStatus.SETTLED
    return StandbyStatus.ACTIVE


def is_future_date(value: Optional[date], today: Optional[date] = None) -> bool:
    """
    True when the shift date is strictly after today. Today is not future.
    A missing date counts as future.
    """
    if value is None:
        return True
    return value > (today or date.today())


def normalize_person_name(value: Optional[str]) -> str:
    return to_title_case(value)


def parse_shift_date(value: Union[date, str, None]) -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError("shift_date", f"'{value}' is not a valid date (YYYY-MM-DD)")
    raise ValidationError("shift_date", "Shift date is required")


def parse_shift_type(value: Union[ShiftType, str, None]) -> ShiftType:
    if isinstance(value, ShiftType):
        return value
    if isinstance(value, str):
        for member in ShiftType:
            if member.value.lower() == value.strip().lower():
                return member
        raise ValidationError("shift_type", f"Shift type must be one of: {[m.value for m in ShiftType]}")
    raise ValidationError("shift_type", "Shift type is required")


def validate_event_fields(
    person_name: Optional[str],
    shift_date: Union[date, str, None],
    shift_type: Union[ShiftType, str, None],
) -> Tuple[str, date, ShiftType]:
    """Check the required fields and return them normalized."""
    name = normalize_person_name(person_name)
    if not name:
        raise ValidationError("person_name", "Please enter a name")
    return name, parse_shift_date(shift_date), parse_shift_type(shift_type)


def _clean(value: Optional[str]) -> Optional[str]:
    cleaned = collapse_whitespace(value)
    return cleaned or None


def resolve_duty_platoon(
    db: Session,
    shift_date: date,
    shift_type: ShiftType,
    manual: Optional[str] = None,
) -> Optional[str]:
    """A manually entered duty platoon wins; otherwise ask the roster."""
    manual = _clean(manual)
    if manual:
        return manual
    return roster_service.platoon_on_duty(db, shift_date, shift_type)


def create_event(
    db: Session,
    ctx: Optional[SessionContext],
    data: StandbyCreate,
) -> StandbyEvent:
    """Add intent: validate, normalize and persist a new unsettled standby."""
    ctx = require_context(ctx)
    name, shift_date, shift_type = validate_event_fields(data.person_name, data.shift_date, data.shift_type)

    event = standby_store.insert(db, ctx, {
        "person_name": name,
        "platoon": _clean(data.platoon),
        "duty_platoon": resolve_duty_platoon(db, shift_date, shift_type, data.duty_platoon),
        "shift_date": shift_date,
        "shift_type": shift_type,
        "worked_for_me": bool(data.worked_for_me),
        "notes": (data.notes or "").strip() or None,
        "settled": False,
        "settled_at": None,
        "settlement_group_id": None,
        "deleted_at": None,
    })
    standby_store.commit(db, "creating standby", refresh=[event])
    PROJECTION_CACHE.invalidate(ctx.user_id)

    logger.info(f"User {ctx.user_id} added standby {event.id} ({event.person_name}, {event.shift_date} {event.shift_type.value})")
    return event


def edit_event(
    db: Session,
    ctx: Optional[SessionContext],
    event_id: int,
    changes: StandbyUpdate,
) -> StandbyEvent:
    """
    Edit intent: update form fields and re-derive the duty platoon.

    Settlement and deletion fields are never touched here.
    """
    ctx = require_context(ctx)
    event = standby_store.get_by_id(db, ctx, event_id)
    sent = changes.model_fields_set

    name, shift_date, shift_type = validate_event_fields(
        changes.person_name if "person_name" in sent else event.person_name,
        changes.shift_date if "shift_date" in sent else event.shift_date,
        changes.shift_type if "shift_type" in sent else event.shift_type,
    )

    fields = {
        "person_name": name,
        "shift_date": shift_date,
        "shift_type": shift_type,
        "duty_platoon": resolve_duty_platoon(db, shift_date, shift_type, changes.duty_platoon),
    }
    if "platoon" in sent:
        fields["platoon"] = _clean(changes.platoon)
    if "worked_for_me" in sent and changes.worked_for_me is not None:
        fields["worked_for_me"] = changes.worked_for_me
    if "notes" in sent:
        fields["notes"] = (changes.notes or "").strip() or None

    event = standby_store.update(db, ctx, event_id, fields)
    standby_store.commit(db, f"editing standby {event_id}", refresh=[event])
    PROJECTION_CACHE.invalidate(ctx.user_id)

    logger.info(f"User {ctx.user_id} edited standby {event_id}")
    return event
