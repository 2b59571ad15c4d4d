import pytest

from core.errors import (
    ApiError,
    NotFoundError,
    NothingToSaveError,
    RecordValidationError,
    StatusFinalError,
    SubmitLockedError,
)
from core.workflow import (
    EditSession,
    ObservationLog,
    PendingState,
    StatusWorkflow,
    SubmitCooldown,
    add_observation,
    create_record,
)
from eventos.models import Cliente, ObsItem
from eventos.presets import ESTADO_PRESUPUESTO_EN_REVISION, LockPolicy, StatusPolicy


class FakeClient:
    def __init__(self, record=None, fail_update=False, fail_get_after=None, fail_obs=False):
        self.record = dict(record or {})
        self.calls = []
        self.fail_update = fail_update
        self.fail_get_after = fail_get_after
        self.fail_obs = fail_obs

    def get_record(self, record_id):
        self.calls.append(("get", record_id))
        gets = sum(1 for c in self.calls if c[0] == "get")
        if self.fail_get_after is not None and gets > self.fail_get_after:
            raise ApiError("caído")
        if str(self.record.get("id")) != str(record_id):
            raise NotFoundError()
        return Cliente.model_validate(self.record)

    def update_record(self, record_id, changes, change_log=None):
        self.calls.append(("put", record_id, dict(changes), change_log))
        if self.fail_update:
            raise ApiError("No se pudo guardar")
        self.record.update(changes)
        return {"message": "ok"}

    def add_observation(self, record_id, texto, tipo=None):
        self.calls.append(("obs", record_id, texto, tipo))
        if self.fail_obs:
            raise ApiError("No se pudo guardar la observación")
        return {"message": "ok"}

    def create_record(self, fields):
        self.calls.append(("post", dict(fields)))
        return {"data": {"id": "50"}}


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def _session(record, **kw):
    client = FakeClient(record, **kw)
    session = EditSession(
        client,
        lock_policy=LockPolicy.FILL_EMPTY_ONLY,
        status_policy=StatusPolicy.ON_BUDGET_FILLED,
        cooldown=SubmitCooldown(10, clock=FakeClock()),
    )
    return client, session


def test_cooldown_blocks_second_submit_inside_window():
    clock = FakeClock()
    cd = SubmitCooldown(10, clock=clock)
    assert not cd.is_locked()
    cd.acquire()
    assert cd.is_locked()
    with pytest.raises(SubmitLockedError):
        cd.acquire()
    clock.now += 9.5
    assert cd.remaining() == pytest.approx(0.5)
    clock.now += 0.5
    cd.acquire()


def test_nothing_to_save_makes_no_network_call():
    client, session = _session({"id": "1", "sector": "Social"})
    session.load("1")
    client.calls.clear()
    with pytest.raises(NothingToSaveError):
        session.submit()
    assert client.calls == []
    assert not session.cooldown.is_locked()


def test_submit_requires_loaded_record():
    _, session = _session({"id": "1"})
    with pytest.raises(RecordValidationError):
        session.submit()


def test_locked_fields_cannot_be_set():
    _, session = _session({"id": "1", "sector": "Social"})
    session.load("1")
    assert session.locked["sector"] is True
    with pytest.raises(RecordValidationError):
        session.set_field("sector", "Corporativo")
    session.set_field("presupuesto", "1000")


def test_open_policy_unlocks_everything():
    _, session = _session({"id": "1", "sector": "Social"})
    session.lock_policy = LockPolicy.OPEN
    session.load("1")
    assert not any(session.locked.values())


def test_submit_sends_minimal_diff_and_refetches():
    client, session = _session({"id": "1", "sector": "Social", "presupuesto": "", "estado": "ASIGNADO"})
    session.load("1")
    session.set_field("presupuesto", " 2000 ")
    diff = session.submit()
    put = next(c for c in client.calls if c[0] == "put")
    assert put[2] == {"presupuesto": "2000", "estado": ESTADO_PRESUPUESTO_EN_REVISION}
    assert [e["field"] for e in put[3]] == ["presupuesto", "estado"]
    assert diff.changes == put[2]
    assert client.calls[-1] == ("get", "1")
    assert session.snapshot["estado"] == ESTADO_PRESUPUESTO_EN_REVISION
    assert session.locked["presupuesto"] is True
    with pytest.raises(NothingToSaveError):
        session.submit()


def test_second_submit_inside_window_is_rejected():
    client, session = _session({"id": "1", "sector": "", "lugar": ""})
    session.load("1")
    session.set_field("sector", "Social")
    session.submit()
    session.set_field("vendedorComercialAsignado", "Lucía")
    with pytest.raises(SubmitLockedError):
        session.submit()
    assert sum(1 for c in client.calls if c[0] == "put") == 1


def test_failed_refetch_falls_back_to_local_merge():
    client, session = _session({"id": "1", "sector": ""}, fail_get_after=1)
    session.load("1")
    session.set_field("sector", "Social")
    session.submit()
    assert session.snapshot["sector"] == "Social"
    assert session.form["sector"] == "Social"


def test_failed_load_resets_session():
    _, session = _session({"id": "1"})
    session.load("1")
    with pytest.raises(NotFoundError):
        session.load("2")
    assert not session.loaded
    assert session.record_id == ""


def test_observation_confirmed_on_success():
    client = FakeClient()
    log = ObservationLog([ObsItem(texto="vieja")])
    op = add_observation(client, "1", log, "  nueva  ")
    assert op.state is PendingState.CONFIRMED
    assert [o.texto for o in log.items] == ["nueva", "vieja"]
    assert client.calls == [("obs", "1", "nueva", None)]


def test_observation_rolled_back_on_failure():
    client = FakeClient(fail_obs=True)
    log = ObservationLog([ObsItem(texto="vieja")])
    with pytest.raises(ApiError):
        add_observation(client, "1", log, "nueva")
    assert [o.texto for o in log.items] == ["vieja"]


def test_rollback_removes_only_its_own_item():
    log = ObservationLog()
    first = log.append_optimistic("igual", "")
    second = log.append_optimistic("igual", "")
    log.rollback(first)
    assert len(log) == 1
    assert log.items[0] is second.item


def test_pending_observation_transitions_once():
    log = ObservationLog()
    op = log.append_optimistic("x", "")
    log.confirm(op)
    with pytest.raises(RuntimeError):
        log.rollback(op)


def test_empty_observation_rejected():
    client = FakeClient()
    with pytest.raises(RecordValidationError):
        add_observation(client, "1", ObservationLog(), "   ")
    assert client.calls == []


def test_approve_sets_final_state():
    client = FakeClient()
    flow = StatusWorkflow(client, "1", "PENDIENTE")
    flow.approve()
    assert flow.estado == "APROBADO"
    assert flow.is_final
    put = client.calls[0]
    assert put[2] == {"estado": "APROBADO"}
    assert put[3][0]["oldValue"] == "PENDIENTE"
    with pytest.raises(StatusFinalError):
        flow.approve()
    with pytest.raises(StatusFinalError):
        flow.begin_rejection()


def test_rejection_requires_reason():
    client = FakeClient()
    flow = StatusWorkflow(client, "1", "PENDIENTE")
    flow.begin_rejection()
    with pytest.raises(RecordValidationError):
        flow.confirm_rejection("  ")
    assert client.calls == []
    flow.cancel_rejection()
    assert flow.estado == "PENDIENTE"
    assert not flow.rejecting


def test_rejection_sends_reason_and_adds_observation():
    client = FakeClient()
    log = ObservationLog()
    flow = StatusWorkflow(client, "1", "PENDIENTE", observations=log)
    flow.begin_rejection()
    flow.confirm_rejection("Sin presupuesto")
    assert client.calls[0][2] == {"estado": "RECHAZADO", "rechazoMotivo": "Sin presupuesto"}
    assert flow.estado == "RECHAZADO"
    assert flow.is_final
    assert log.items[0].texto == "Sin presupuesto"
    assert log.items[0].tipo == "rechazo"


def test_failed_rejection_restores_state():
    client = FakeClient(fail_update=True)
    log = ObservationLog()
    flow = StatusWorkflow(client, "1", "PENDIENTE", observations=log)
    flow.begin_rejection()
    with pytest.raises(ApiError):
        flow.confirm_rejection("motivo")
    assert flow.estado == "PENDIENTE"
    assert not flow.rejecting
    assert len(log) == 0


def test_create_record_requires_name():
    client = FakeClient()
    with pytest.raises(RecordValidationError):
        create_record(client, {"nombre": "  ", "mail": "a@b.com"})
    assert client.calls == []


def test_create_record_drops_empty_values_and_returns_warnings():
    client = FakeClient()
    body, issues = create_record(client, {"id": "9", "nombre": "Ana", "mail": "no-mail", "sector": ""})
    assert client.calls == [("post", {"nombre": "Ana", "mail": "no-mail"})]
    assert body["data"]["id"] == "50"
    assert [i.code for i in issues] == ["MAIL_FORMAT"]


def test_failed_save_keeps_state_and_can_be_retried():
    clock = FakeClock()
    client = FakeClient({"id": "1", "sector": "", "presupuesto": ""}, fail_update=True)
    session = EditSession(client, cooldown=SubmitCooldown(10, clock=clock))
    session.load("1")
    snapshot = dict(session.snapshot)
    session.set_field("sector", "Social")
    form = dict(session.form)
    with pytest.raises(ApiError):
        session.submit()
    assert session.snapshot == snapshot
    assert session.form == form
    client.fail_update = False
    with pytest.raises(SubmitLockedError):
        session.submit()
    clock.now += 10
    session.submit()
    puts = [c for c in client.calls if c[0] == "put"]
    assert len(puts) == 2
    assert puts[-1][2] == {"sector": "Social"}
    assert session.snapshot["sector"] == "Social"


def test_stored_time_in_sheet_format_is_locked_in_session():
    client, session = _session({"id": "1", "horarioInicioEvento": "9:30"})
    session.load("1")
    assert session.form["horarioInicioEvento"] == "9:30"
    assert session.locked["horarioInicioEvento"] is True
    with pytest.raises(RecordValidationError):
        session.set_field("horarioInicioEvento", "18:00")
    session.form["horarioInicioEvento"] = "18:00"
    with pytest.raises(NothingToSaveError):
        session.submit()
    assert not any(c[0] == "put" for c in client.calls)
