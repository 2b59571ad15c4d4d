"""Field change log attached to updates."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional


@dataclass(frozen=True)
class ChangeLogEntry:
    field: str
    old_value: Any
    new_value: Any
    timestamp: datetime

    def as_dict(self) -> dict:
        return {
            "field": self.field,
            "oldValue": self.old_value,
            "newValue": self.new_value,
            "timestamp": self.timestamp.isoformat(),
        }


class ChangeLog:
    """Ordered, in-memory change log for one update."""

    def __init__(self, now: Optional[datetime] = None) -> None:
        self.entries: List[ChangeLogEntry] = []
        self._now = now

    def record(self, field: str, old_value: Any, new_value: Any) -> None:
        """Record a change to a field; all entries of one log share a timestamp."""
        if self._now is None:
            self._now = datetime.now(timezone.utc)
        self.entries.append(
            ChangeLogEntry(
                field=field,
                old_value=old_value,
                new_value=new_value,
                timestamp=self._now,
            )
        )

    def fields(self) -> List[str]:
        return [e.field for e in self.entries]

    def as_dict(self) -> List[dict]:
        """Return log entries in the wire shape sent with ``PUT``."""
        return [e.as_dict() for e in self.entries]
