"""
Narrative service: the one-sentence status shown for each standby.
"""
from datetime import date
from typing import Iterable, Optional

from app.core.utils import format_display_date, format_platoon_label
from app.models.standby import StandbyEvent
from app.services.projection_service import find_partner
from app.services.standby_service import is_future_date


def _is_settling_shift(record: StandbyEvent, partner: StandbyEvent) -> bool:
    """The later shift of a pair repays the earlier one. Ties go by id."""
    if record.shift_date != partner.shift_date:
        return record.shift_date > partner.shift_date
    return record.id > partner.id


def narrative(record: StandbyEvent, partner: Optional[StandbyEvent] = None, today: Optional[date] = None) -> str:
    """
    Status sentence for one record.

    ``partner`` is the other side of a settled pair when it is known.
    """
    day = format_display_date(record.shift_date)
    shift = f" {record.shift_type.value}" if record.shift_type else ""
    name = record.person_name or "-"

    if record.deleted_at is not None:
        return f"{day}{shift}"

    plain = (
        f"{name} worked for you on {day}{shift}."
        if record.worked_for_me
        else f"You worked for {name} on {day}{shift}."
    )

    future = is_future_date(record.shift_date, today)
    where = f"{day} - {format_platoon_label(record.duty_platoon or record.platoon)}{shift}"

    if record.settled:
        if partner is None or not _is_settling_shift(record, partner):
            return plain
        if record.worked_for_me:
            return (
                f"Once {name} works for you on {where}, your shifts will be settled."
                if future
                else f"After {name} worked for you on {where}, your shifts are settled."
            )
        return (
            f"Once you work for {name} on {where}, your shifts will be settled."
            if future
            else f"After you worked for {name} on {where}, your shifts are settled."
        )

    if record.worked_for_me:
        return (
            f"{name} will work for you on {where}. You will owe them a shift."
            if future
            else f"{name} worked for you on {where}. You owe them a shift."
        )
    return (
        f"You will work for {name} on {where}. They will owe you a shift."
        if future
        else f"You worked for {name} on {where}. They owe you a shift."
    )


def narrative_in_snapshot(record: StandbyEvent, records: Iterable[StandbyEvent], today: Optional[date] = None) -> str:
    """Narrative with the partner resolved from a snapshot of the owner's records."""
    partner = find_partner(record, records) if record.settled else None
    return narrative(record, partner, today)
