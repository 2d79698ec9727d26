"""Domain event primitives for the shared kernel."""
from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

_ENVELOPE_FIELDS = {"event_id", "occurred_at", "correlation_id", "causation_id"}


@dataclass(frozen=True)
class DomainEvent(ABC):
    """Base class for events raised by the domain and published to in-process handlers."""

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    correlation_id: Optional[UUID] = None
    causation_id: Optional[UUID] = None

    @classmethod
    def event_type(cls) -> str:
        return f"{cls.__module__}.{cls.__qualname__}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type(),
            "occurred_at": self.occurred_at.isoformat(),
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "causation_id": str(self.causation_id) if self.causation_id else None,
            "payload": {
                item.name: _serialize(getattr(self, item.name))
                for item in fields(self)
                if item.name not in _ENVELOPE_FIELDS
            },
        }


def _serialize(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value
