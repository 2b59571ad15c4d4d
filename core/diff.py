"""Field-by-field diff of an edited record against its fetched snapshot.

Everything here is pure: the caller owns the network call and decides what
to do with an empty result (it must not send anything).
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.audit import ChangeLog, ChangeLogEntry
from eventos.presets import (
    BUDGET_FIELD,
    CARGA_FIELDS,
    EDITABLE_FIELDS,
    ESTADO_PRESUPUESTO_EN_REVISION,
    FIELD_LABELS,
    STATUS_FIELD,
    TIME_FIELDS,
    LockPolicy,
    StatusPolicy,
)

HHMM_RE = re.compile(r"([01]\d|2[0-3]):[0-5]\d")


def normalize_time(value: Any) -> str:
    """Return ``value`` as strict 24h ``HH:MM`` or ``""``."""
    if value is None:
        return ""
    s = str(value).strip()
    return s if HHMM_RE.fullmatch(s) else ""


def raw_text(value: Any) -> str:
    """Trimmed text of a stored value, without format checks."""
    return "" if value is None else str(value).strip()


def normalize_value(field_name: str, value: Any) -> str:
    if field_name in TIME_FIELDS:
        return normalize_time(value)
    return raw_text(value)


def _as_mapping(record: Any) -> Mapping[str, Any]:
    if record is None:
        return {}
    if hasattr(record, "wire_fields"):
        return record.wire_fields()
    return record


def compute_locked(snapshot: Any, fields: Iterable[str] = CARGA_FIELDS) -> Dict[str, bool]:
    """Map each field to whether the snapshot already holds a value for it.

    A stored value counts even when it is not in canonical form (a sheet
    time such as ``14:30:00``).
    """
    snap = _as_mapping(snapshot)
    return {f: bool(raw_text(snap.get(f))) for f in fields}


@dataclass
class RecordDiff:
    changes: Dict[str, str] = field(default_factory=dict)
    log: List[ChangeLogEntry] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.changes

    def describe(self) -> List[str]:
        """One line per change, e.g. ``Presupuesto: — → 2500``."""
        return [
            f"{FIELD_LABELS.get(e.field, e.field)}: {e.old_value or '—'} → {e.new_value or '—'}"
            for e in self.log
        ]

    def payload(self, include_log: bool = True) -> Dict[str, Any]:
        """Body for ``PUT /api/eventSheet/{id}``."""
        body: Dict[str, Any] = dict(self.changes)
        if include_log and self.log:
            body["changeLog"] = [e.as_dict() for e in self.log]
        return body


def budget_forces_status(policy: StatusPolicy, before: str, after: str) -> bool:
    if policy is StatusPolicy.ON_BUDGET_FILLED:
        return not before and bool(after)
    if policy is StatusPolicy.ON_BUDGET_CHANGED:
        return before != after
    return False


def diff_records(
    snapshot: Any,
    edited: Any,
    fields: Iterable[str] = EDITABLE_FIELDS,
    lock_policy: LockPolicy = LockPolicy.FILL_EMPTY_ONLY,
    status_policy: StatusPolicy = StatusPolicy.ON_BUDGET_FILLED,
    now: Optional[datetime] = None,
) -> RecordDiff:
    """Compute the minimal change-set between ``snapshot`` and ``edited``.

    Only keys present in ``edited`` are compared, so a partial form never
    clears fields it does not show. Values in the change-set are the
    normalized edited values; the log keeps the stored old value as it was.

    The defaults match the product settings: fill empty fields only, and a
    first budget moves the status to review. Pass ``LockPolicy.OPEN`` and
    ``StatusPolicy.MANUAL`` for a plain field diff.

    With ``LockPolicy.FILL_EMPTY_ONLY`` a field whose snapshot value is
    non-empty is never proposed. A budget change may inject a status
    transition according to ``status_policy``.
    """
    snap = _as_mapping(snapshot)
    new = _as_mapping(edited)
    lock_policy = LockPolicy(lock_policy)
    status_policy = StatusPolicy(status_policy)
    fields = [f for f in fields if f != "id"]
    locked = compute_locked(snap, fields) if lock_policy is LockPolicy.FILL_EMPTY_ONLY else {}

    log = ChangeLog(now)
    changes: Dict[str, str] = {}
    for f in fields:
        if f == STATUS_FIELD or f not in new or locked.get(f):
            continue
        before = normalize_value(f, snap.get(f))
        after = normalize_value(f, new.get(f))
        if before != after:
            changes[f] = after
            log.record(f, raw_text(snap.get(f)), after)

    status_before = normalize_value(STATUS_FIELD, snap.get(STATUS_FIELD))
    forced = BUDGET_FIELD in changes and budget_forces_status(
        status_policy, normalize_value(BUDGET_FIELD, snap.get(BUDGET_FIELD)), changes[BUDGET_FIELD]
    )
    if forced:
        if status_before != ESTADO_PRESUPUESTO_EN_REVISION:
            changes[STATUS_FIELD] = ESTADO_PRESUPUESTO_EN_REVISION
            log.record(STATUS_FIELD, status_before, ESTADO_PRESUPUESTO_EN_REVISION)
    elif (
        status_policy is not StatusPolicy.SERVER
        and STATUS_FIELD in fields
        and STATUS_FIELD in new
        and not locked.get(STATUS_FIELD)
    ):
        status_after = normalize_value(STATUS_FIELD, new.get(STATUS_FIELD))
        if status_before != status_after:
            changes[STATUS_FIELD] = status_after
            log.record(STATUS_FIELD, status_before, status_after)

    return RecordDiff(changes=changes, log=log.entries)


def apply_changes(snapshot: Any, changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``snapshot`` with ``changes`` written over it."""
    out = dict(_as_mapping(snapshot))
    out.update(changes)
    return out
