"""
Projection service: list categories, history grouping and counters.

Everything here is a pure function over a snapshot of one owner's records;
nothing is written.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Callable, Dict, Iterable, List, Optional

from app.core.exceptions import ValidationError
from app.core.utils import collapse_whitespace, normalize_name
from app.models.standby import StandbyEvent

OWED_TO_ME = "owed_to_me"
I_OWE = "i_owe"
UPCOMING_AGREED = "upcoming_agreed"
UPCOMING_REQUESTED = "upcoming_requested"
HISTORY_SETTLED = "history_settled"
HISTORY_DELETED = "history_deleted"

SORT_MODES = ("date_desc", "date_asc", "name_az", "name_za", "platoon_az", "platoon_za")


def _live(r: StandbyEvent) -> bool:
    return r.deleted_at is None


def _future(r: StandbyEvent, today: date) -> bool:
    return r.shift_date is not None and r.shift_date > today


def is_owed_to_me(r: StandbyEvent, today: date) -> bool:
    # Future shifts wait in the upcoming list until they have been worked
    return _live(r) and not r.settled and not r.worked_for_me and not _future(r, today)


def is_i_owe(r: StandbyEvent, today: date) -> bool:
    return _live(r) and not r.settled and r.worked_for_me and not _future(r, today)


def is_upcoming_agreed(r: StandbyEvent, today: date) -> bool:
    return _live(r) and not r.worked_for_me and _future(r, today)


def is_upcoming_requested(r: StandbyEvent, today: date) -> bool:
    return _live(r) and r.worked_for_me and _future(r, today)


def is_history_settled(r: StandbyEvent, today: date) -> bool:
    return _live(r) and bool(r.settled)


def is_history_deleted(r: StandbyEvent, today: date) -> bool:
    return not _live(r)


CATEGORY_PREDICATES: Dict[str, Callable[[StandbyEvent, date], bool]] = {
    OWED_TO_ME: is_owed_to_me,
    I_OWE: is_i_owe,
    UPCOMING_AGREED: is_upcoming_agreed,
    UPCOMING_REQUESTED: is_upcoming_requested,
    HISTORY_SETTLED: is_history_settled,
    HISTORY_DELETED: is_history_deleted,
}


def _as_datetime(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def categorize(records: Iterable[StandbyEvent], category: str, today: Optional[date] = None) -> List[StandbyEvent]:
    """
    Records in one category, in display order.

    Active lists read newest shift first, upcoming lists chronologically,
    history lists by when the record was settled or deleted.
    """
    predicate = CATEGORY_PREDICATES.get(category)
    if predicate is None:
        raise ValidationError("view", f"Unknown view '{category}'")
    today = today or date.today()
    rows = [r for r in records if predicate(r, today)]

    if category in (UPCOMING_AGREED, UPCOMING_REQUESTED):
        rows.sort(key=lambda r: (r.shift_date, r.id))
    elif category == HISTORY_SETTLED:
        rows.sort(key=lambda r: (_as_datetime(r.settled_at) or datetime.min, r.id), reverse=True)
    elif category == HISTORY_DELETED:
        rows.sort(key=lambda r: (_as_datetime(r.deleted_at) or datetime.min, r.id), reverse=True)
    else:
        rows.sort(key=lambda r: (r.shift_date, r.id), reverse=True)
    return rows


@dataclass
class PositionCounters:
    owed_to_me: int = 0
    i_owe: int = 0


def position_counters(records: Iterable[StandbyEvent]) -> PositionCounters:
    """Live unsettled shifts each way, whatever their date."""
    counters = PositionCounters()
    for r in records:
        if not _live(r) or r.settled:
            continue
        if r.worked_for_me:
            counters.i_owe += 1
        else:
            counters.owed_to_me += 1
    return counters


@dataclass
class HistoryGroup:
    group_id: str
    is_single: bool
    sort_key: Optional[datetime]
    records: List[StandbyEvent] = field(default_factory=list)


def group_history(records: Iterable[StandbyEvent], view: str) -> List[HistoryGroup]:
    """
    Group the settled or deleted history into pairs and singles.

    Records sharing a settlement group id become one unit. The newest
    settled_at (or deleted_at) among members sorts the unit, newest first;
    ties fall back to the group or record identifier.
    """
    if view not in ("settled", "deleted"):
        raise ValidationError("view", f"Unknown history view '{view}'")
    category = HISTORY_SETTLED if view == "settled" else HISTORY_DELETED
    stamp = (lambda r: r.settled_at) if view == "settled" else (lambda r: r.deleted_at)
    rows = [r for r in records if CATEGORY_PREDICATES[category](r, date.today())]

    by_group: Dict[str, List[StandbyEvent]] = {}
    singles: List[StandbyEvent] = []
    for r in rows:
        if r.settlement_group_id:
            by_group.setdefault(r.settlement_group_id, []).append(r)
        else:
            singles.append(r)

    groups: List[HistoryGroup] = []
    for gid, members in by_group.items():
        members.sort(key=lambda r: (r.shift_date, r.id), reverse=True)
        stamps = [_as_datetime(stamp(r)) for r in members if stamp(r) is not None]
        groups.append(HistoryGroup(
            group_id=gid,
            is_single=len(members) == 1,
            sort_key=max(stamps) if stamps else None,
            records=members,
        ))
    for r in singles:
        groups.append(HistoryGroup(
            group_id=f"single-{r.id}",
            is_single=True,
            sort_key=_as_datetime(stamp(r)) or _as_datetime(r.shift_date),
            records=[r],
        ))

    groups.sort(key=lambda g: (g.sort_key or datetime.min, g.group_id), reverse=True)
    return groups


def find_partner(record: StandbyEvent, records: Iterable[StandbyEvent]) -> Optional[StandbyEvent]:
    """The other live member of the record's pair, if it is in the snapshot."""
    gid = record.settlement_group_id
    if not gid:
        return None
    for other in records:
        if other.id != record.id and other.settlement_group_id == gid and other.deleted_at is None:
            return other
    return None


@dataclass
class Dashboard:
    counters: PositionCounters
    owed_to_me: List[StandbyEvent]
    i_owe: List[StandbyEvent]
    upcoming_agreed: List[StandbyEvent]
    upcoming_requested: List[StandbyEvent]


def build_dashboard(records: List[StandbyEvent], today: Optional[date] = None) -> Dashboard:
    today = today or date.today()
    return Dashboard(
        counters=position_counters(records),
        owed_to_me=categorize(records, OWED_TO_ME, today),
        i_owe=categorize(records, I_OWE, today),
        upcoming_agreed=categorize(records, UPCOMING_AGREED, today),
        upcoming_requested=categorize(records, UPCOMING_REQUESTED, today),
    )


def platoon_options(records: Iterable[StandbyEvent]) -> List[str]:
    """Distinct home platoons for the filter dropdown."""
    seen = {collapse_whitespace(r.platoon) for r in records}
    seen.discard("")
    return sorted(seen, key=str.lower)


def filter_rows(
    records: Iterable[StandbyEvent],
    search: Optional[str] = None,
    platoon: Optional[str] = None,
    sort: Optional[str] = None,
) -> List[StandbyEvent]:
    """
    Search, platoon filter and sort over an already fetched list.
    Without a sort mode the incoming order is kept.
    """
    if sort is not None and sort not in SORT_MODES:
        raise ValidationError("sort", f"Sort must be one of: {list(SORT_MODES)}")
    rows = list(records)

    needle = normalize_name(search)
    if needle:
        rows = [
            r for r in rows
            if needle in normalize_name(r.person_name) or needle in normalize_name(r.platoon)
        ]
    wanted = collapse_whitespace(platoon)
    if wanted:
        rows = [r for r in rows if collapse_whitespace(r.platoon) == wanted]

    if sort is None:
        return rows
    if sort == "date_desc":
        rows.sort(key=lambda r: (r.shift_date, r.id), reverse=True)
    elif sort == "date_asc":
        rows.sort(key=lambda r: (r.shift_date, r.id))
    elif sort in ("name_az", "name_za"):
        rows.sort(key=lambda r: (normalize_name(r.person_name), r.id), reverse=sort == "name_za")
    else:
        rows.sort(key=lambda r: (collapse_whitespace(r.platoon).lower(), r.id), reverse=sort == "platoon_za")
    return rows
