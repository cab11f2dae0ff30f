"""
Registration handling for Broker Graph.

Turns inbound registration events into repository calls: an update
registers or replaces the entity graph, an unavailable event passivates it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from rdflib import Graph

from .events import RegistrationEvent, RegistrationEventType, RegistrationResult
from ..repository.repository_facade import RepositoryFacade
from ..utils.errors import InternalError, MalformedInputError, RegistryError, describe_error

logger = logging.getLogger(__name__)


class InfrastructureComponentStatusHandler(ABC):
    """Persists status changes of infrastructure components."""

    @abstractmethod
    def updated(self, entity_uri: str, payload: Graph) -> str:
        """
        Register a new entity or update a known one.

        Returns:
            The URI under which the entity can be found
        """
        pass

    @abstractmethod
    def unavailable(self, entity_uri: str) -> None:
        """Mark an entity as no longer available."""
        pass


class RepositoryStatusHandler(InfrastructureComponentStatusHandler):
    """Status handler storing each entity in its own named graph."""

    def __init__(self, repository: RepositoryFacade, rewrite_uri: Optional[Callable[[str], str]] = None):
        self.repository = repository
        self.rewrite_uri = rewrite_uri

    def updated(self, entity_uri: str, payload: Graph) -> str:
        self.repository.replace_statements(payload, entity_uri)
        if self.rewrite_uri is not None:
            return self.rewrite_uri(entity_uri)
        return entity_uri

    def unavailable(self, entity_uri: str) -> None:
        self.repository.change_passivation_of_graph(entity_uri, False)


class RegistrationHandler:
    """
    Handles UPDATE and UNAVAILABLE registration events.

    Repository errors reach the caller unchanged; anything else is logged
    and reported as an InternalError with a non-empty description.
    """

    def __init__(self, status_handler: InfrastructureComponentStatusHandler):
        self.status_handler = status_handler

    def handle(self, event: RegistrationEvent) -> RegistrationResult:
        logger.info(f"Handling {event.event_type.value} event for {event.entity_uri}")

        location = None
        try:
            if event.event_type is RegistrationEventType.UPDATE:
                if event.payload is None:
                    raise MalformedInputError("Missing payload in update event")
                location = self.status_handler.updated(event.entity_uri, event.payload)
            elif event.event_type is RegistrationEventType.UNAVAILABLE:
                self.status_handler.unavailable(event.entity_uri)
            else:
                raise MalformedInputError(f"Unsupported event type: {event.event_type}")
        except RegistryError:
            raise
        except Exception as e:
            logger.error("Failed to process message.", exc_info=True)
            raise InternalError(describe_error(e)) from e

        return RegistrationResult(event=event, location=location)
