"""
Domain Events Module

Architectural Intent:
- Immutable records of attempt transitions, keyed by node name
- Collected on the DeploymentAttempt and published once the run is over
- `to_dict()` flattens every field for JSON logs and reports
"""

from dataclasses import dataclass, field, fields
from datetime import datetime, UTC
from typing import Any


@dataclass(frozen=True)
class DomainEvent:
    occurred_at: str = field(
        default_factory=lambda: datetime.now(UTC).isoformat(), init=False, repr=False
    )
    aggregate_id: str = ""

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["event_type"] = self.event_type
        return data
