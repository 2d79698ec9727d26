from dataclasses import dataclass, field
from uuid import UUID, uuid4

import pytest

from bigox.shared_kernel.domain_events import DomainEvent


@dataclass(frozen=True)
class InvoiceIssued(DomainEvent):
    invoice_id: UUID = field(default_factory=uuid4)
    amount: int = 0


def test_domain_event_envelope_defaults():
    event = InvoiceIssued(amount=10)

    assert isinstance(event.event_id, UUID)
    assert event.occurred_at.tzinfo is not None
    assert event.correlation_id is None
    assert event.causation_id is None


def test_domain_event_to_dict_separates_payload():
    correlation = uuid4()
    event = InvoiceIssued(amount=10, correlation_id=correlation)

    data = event.to_dict()

    assert data["event_type"] == f"{__name__}.InvoiceIssued"
    assert data["correlation_id"] == str(correlation)
    assert data["causation_id"] is None
    assert data["payload"] == {"invoice_id": str(event.invoice_id), "amount": 10}


def test_domain_event_is_immutable():
    event = InvoiceIssued()

    with pytest.raises(AttributeError):
        event.amount = 5
