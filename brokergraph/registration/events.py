"""
Inbound registration events.

An event is either an UPDATE (register or update an entity, payload
required) or UNAVAILABLE (deregister, no payload).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from rdflib import Graph


class RegistrationEventType(Enum):
    UPDATE = "update"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class RegistrationEvent:
    event_type: RegistrationEventType
    entity_uri: str
    payload: Optional[Graph] = None
    message_id: Optional[str] = None

    @classmethod
    def update(cls, entity_uri: str, payload: Optional[Graph], message_id: Optional[str] = None) -> "RegistrationEvent":
        return cls(RegistrationEventType.UPDATE, entity_uri, payload, message_id)

    @classmethod
    def unavailable(cls, entity_uri: str, message_id: Optional[str] = None) -> "RegistrationEvent":
        return cls(RegistrationEventType.UNAVAILABLE, entity_uri, None, message_id)


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a successfully handled event."""
    event: RegistrationEvent
    location: Optional[str] = None
