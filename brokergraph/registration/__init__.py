from .events import RegistrationEvent, RegistrationEventType, RegistrationResult
from .registration_handler import (
    InfrastructureComponentStatusHandler,
    RegistrationHandler,
    RepositoryStatusHandler,
)

__all__ = [
    'RegistrationEvent',
    'RegistrationEventType',
    'RegistrationResult',
    'InfrastructureComponentStatusHandler',
    'RegistrationHandler',
    'RepositoryStatusHandler',
]
