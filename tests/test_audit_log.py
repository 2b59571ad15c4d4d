import pathlib
import sys
from datetime import datetime, timezone

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from core.audit import ChangeLog


def test_change_log_records_field_and_timestamp():
    log = ChangeLog()
    log.record("presupuesto", "", "1000")
    assert len(log.entries) == 1
    entry = log.entries[0]
    assert entry.field == "presupuesto"
    assert entry.old_value == ""
    assert entry.new_value == "1000"
    assert entry.timestamp is not None


def test_entries_share_one_timestamp_and_wire_shape():
    now = datetime(2024, 1, 2, 3, 4, tzinfo=timezone.utc)
    log = ChangeLog(now)
    log.record("presupuesto", "", "1000")
    log.record("estado", "ASIGNADO", "PRESUPUESTO EN REVISIÓN")
    assert log.fields() == ["presupuesto", "estado"]
    assert log.as_dict()[1] == {
        "field": "estado",
        "oldValue": "ASIGNADO",
        "newValue": "PRESUPUESTO EN REVISIÓN",
        "timestamp": "2024-01-02T03:04:00+00:00",
    }
