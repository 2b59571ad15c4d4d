"""Caller side of the edit workflow: fetch, diff, submit, re-fetch.

The diff engine in :mod:`core.diff` is pure; this module owns the network
calls, the double-submit guard and the optimistic observation list.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.audit import ChangeLog
from core.diff import RecordDiff, apply_changes, compute_locked, diff_records, normalize_value, raw_text
from core.errors import (
    CrmError,
    NothingToSaveError,
    RecordValidationError,
    StatusFinalError,
    SubmitLockedError,
)
from core.validation import Issue, has_blocking, validate_record
from eventos.models import Cliente, ObsItem
from eventos.presets import (
    CARGA_FIELDS,
    ESTADO_APROBADO,
    ESTADO_RECHAZADO,
    FINAL_STATES,
    OBS_TIPO_RECHAZO,
    STATUS_FIELD,
    LockPolicy,
    StatusPolicy,
)

logger = logging.getLogger(__name__)

DEFAULT_TZ = "America/Argentina/Buenos_Aires"


def now_local(tz: str = DEFAULT_TZ) -> str:
    """Short local timestamp used on optimistic observations."""
    try:
        return datetime.now(ZoneInfo(tz)).strftime("%d/%m/%Y %H:%M")
    except ZoneInfoNotFoundError:
        return datetime.now(timezone.utc).isoformat()


def is_final(estado: str) -> bool:
    return (estado or "").strip().upper() in FINAL_STATES


# ---------------------------------------------------------------------------
# Double-submit guard
# ---------------------------------------------------------------------------


class SubmitCooldown:
    """Monotonic "unlock-at" token.

    ``acquire`` closes the lock before any request goes out, so a second
    click in the same rerun is rejected even though the UI has not redrawn.
    """

    def __init__(self, window: float = 10.0, clock: Callable[[], float] = time.monotonic):
        self.window = float(window)
        self._clock = clock
        self.unlock_at = float("-inf")

    def is_locked(self) -> bool:
        return self._clock() < self.unlock_at

    def remaining(self) -> float:
        return max(0.0, self.unlock_at - self._clock())

    def acquire(self) -> None:
        now = self._clock()
        if now < self.unlock_at:
            raise SubmitLockedError()
        self.unlock_at = now + self.window


# ---------------------------------------------------------------------------
# Optimistic observations
# ---------------------------------------------------------------------------


class PendingState(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


@dataclass(eq=False)
class PendingObservation:
    item: ObsItem
    state: PendingState = PendingState.PENDING

    def _transition(self, target: PendingState) -> None:
        if self.state is not PendingState.PENDING:
            raise RuntimeError(f"observation already {self.state.value}")
        self.state = target


class ObservationLog:
    """Observations for one record, newest first."""

    def __init__(self, items: Iterable[ObsItem] = ()) -> None:
        self.items: List[ObsItem] = list(items)

    def __len__(self) -> int:
        return len(self.items)

    def append_optimistic(self, texto: str, fecha: str, tipo: Optional[str] = None) -> PendingObservation:
        op = PendingObservation(ObsItem(texto=texto, fecha=fecha, tipo=tipo))
        self.items.insert(0, op.item)
        return op

    def confirm(self, op: PendingObservation) -> None:
        op._transition(PendingState.CONFIRMED)

    def rollback(self, op: PendingObservation) -> None:
        op._transition(PendingState.ROLLED_BACK)
        self.items = [i for i in self.items if i is not op.item]


def add_observation(
    client: Any,
    record_id: str,
    log: ObservationLog,
    texto: str,
    tipo: Optional[str] = None,
    tz: str = DEFAULT_TZ,
) -> PendingObservation:
    """Append locally, post, then confirm or roll back."""
    texto = (texto or "").strip()
    if not texto:
        raise RecordValidationError("La observación no puede estar vacía")
    op = log.append_optimistic(texto, now_local(tz), tipo)
    try:
        client.add_observation(record_id, texto, tipo)
    except CrmError:
        log.rollback(op)
        logger.warning("Observation for %s rolled back", record_id)
        raise
    log.confirm(op)
    return op


# ---------------------------------------------------------------------------
# Approve / reject
# ---------------------------------------------------------------------------


class StatusWorkflow:
    """Approve or reject a record; both states are final."""

    def __init__(
        self,
        client: Any,
        record_id: str,
        estado: str = "",
        observations: Optional[ObservationLog] = None,
        tz: str = DEFAULT_TZ,
    ) -> None:
        self.client = client
        self.observations = observations
        self.tz = tz
        self.record_id = record_id
        self.estado = estado or ""
        self.previous = self.estado
        self.rejecting = False

    @property
    def is_final(self) -> bool:
        return is_final(self.estado) and not self.rejecting

    def _put(self, nuevo: str, extra: Optional[Mapping[str, Any]] = None) -> None:
        log = ChangeLog()
        log.record(STATUS_FIELD, self.previous, nuevo)
        body: Dict[str, Any] = {STATUS_FIELD: nuevo, **(extra or {})}
        self.client.update_record(self.record_id, body, log.as_dict())

    def approve(self) -> None:
        if self.is_final:
            raise StatusFinalError()
        if self.rejecting:
            raise RecordValidationError("Confirmá o cancelá el rechazo primero")
        self._put(ESTADO_APROBADO)
        self.estado = self.previous = ESTADO_APROBADO
        logger.info("Record %s approved", self.record_id)

    def begin_rejection(self) -> None:
        if self.rejecting:
            return
        if self.is_final:
            raise StatusFinalError()
        self.previous = self.estado
        self.estado = ESTADO_RECHAZADO
        self.rejecting = True

    def cancel_rejection(self) -> None:
        self.estado = self.previous
        self.rejecting = False

    def confirm_rejection(self, motivo: str) -> None:
        motivo = (motivo or "").strip()
        if not motivo:
            raise RecordValidationError("Debes ingresar el motivo del rechazo.")
        if not self.rejecting:
            self.begin_rejection()
        op = None
        if self.observations is not None:
            op = self.observations.append_optimistic(motivo, now_local(self.tz), OBS_TIPO_RECHAZO)
        try:
            self._put(ESTADO_RECHAZADO, {"rechazoMotivo": motivo})
        except CrmError:
            if op is not None:
                self.observations.rollback(op)
            self.cancel_rejection()
            raise
        if op is not None:
            self.observations.confirm(op)
        self.estado = self.previous = ESTADO_RECHAZADO
        self.rejecting = False
        logger.info("Record %s rejected", self.record_id)


# ---------------------------------------------------------------------------
# Edit session
# ---------------------------------------------------------------------------


class EditSession:
    """Snapshot plus form state for one record on the data-entry form."""

    def __init__(
        self,
        client: Any,
        fields: Iterable[str] = CARGA_FIELDS,
        lock_policy: LockPolicy = LockPolicy.FILL_EMPTY_ONLY,
        status_policy: StatusPolicy = StatusPolicy.ON_BUDGET_FILLED,
        cooldown: Optional[SubmitCooldown] = None,
    ) -> None:
        self.client = client
        self.fields = list(fields)
        self.lock_policy = LockPolicy(lock_policy)
        self.status_policy = StatusPolicy(status_policy)
        self.cooldown = cooldown or SubmitCooldown()
        self.snapshot: Optional[Dict[str, Any]] = None
        self.form: Dict[str, str] = {}
        self.status: Optional[StatusWorkflow] = None
        self.reset()

    def reset(self) -> None:
        self.snapshot = None
        self.form = {f: "" for f in self.fields}
        self.status = None

    @property
    def record_id(self) -> str:
        return str((self.snapshot or {}).get("id", ""))

    @property
    def loaded(self) -> bool:
        return self.snapshot is not None

    @property
    def locked(self) -> Dict[str, bool]:
        if self.lock_policy is not LockPolicy.FILL_EMPTY_ONLY:
            return {f: False for f in self.fields}
        return compute_locked(self.snapshot, self.fields)

    def _take_snapshot(self, record: Cliente) -> None:
        self.snapshot = record.wire_fields()
        self.form = {f: raw_text(self.snapshot.get(f)) for f in self.fields}
        self.status = StatusWorkflow(self.client, record.id, record.estado)

    def load(self, record_id: str) -> Cliente:
        try:
            record = self.client.get_record(record_id)
        except CrmError:
            self.reset()
            raise
        self._take_snapshot(record)
        logger.debug("Snapshot taken for %s", record.id)
        return record

    def set_field(self, name: str, value: str) -> None:
        if name not in self.form:
            raise KeyError(name)
        if self.locked.get(name):
            raise RecordValidationError("Este dato ya existe y no puede editarse.")
        self.form[name] = value

    def pending_diff(self, now: Optional[datetime] = None) -> RecordDiff:
        return diff_records(
            self.snapshot or {},
            self.form,
            fields=self.fields,
            lock_policy=self.lock_policy,
            status_policy=self.status_policy,
            now=now,
        )

    def submit(self, now: Optional[datetime] = None) -> RecordDiff:
        """Send the minimal change-set and re-fetch.

        Raises ``NothingToSaveError`` without touching the network when the
        form holds no change.
        """
        if not self.loaded:
            raise RecordValidationError("Primero busca un cliente válido por ID")
        diff = self.pending_diff(now)
        if diff.is_empty:
            raise NothingToSaveError()
        self.cooldown.acquire()
        record_id = self.record_id
        self.client.update_record(record_id, diff.changes, [e.as_dict() for e in diff.log])
        try:
            record = self.client.get_record(record_id)
        except CrmError as exc:
            logger.warning("Re-fetch of %s failed after save: %s", record_id, exc)
            self.snapshot = apply_changes(self.snapshot, diff.changes)
            self.form = {f: raw_text(self.snapshot.get(f)) for f in self.fields}
            if self.status is not None and STATUS_FIELD in diff.changes:
                self.status.estado = self.status.previous = diff.changes[STATUS_FIELD]
        else:
            self._take_snapshot(record)
        return diff


# ---------------------------------------------------------------------------
# New records
# ---------------------------------------------------------------------------


def create_record(client: Any, fields: Mapping[str, Any]) -> Tuple[Dict[str, Any], List[Issue]]:
    """Validate and POST a new row. The sheet assigns the id."""
    payload = {k: normalize_value(k, v) for k, v in fields.items() if k != "id"}
    payload = {k: v for k, v in payload.items() if v}
    issues = validate_record(fields, creating=True)
    if has_blocking(issues):
        raise RecordValidationError(next(i.message for i in issues if i.severity == "critical"))
    body = client.create_record(payload)
    return body, issues
