"""
Domain Layer - Core DDD building blocks

This module provides base classes for Domain-Driven Design:
- Entities: Objects with identity and lifecycle
- Value Objects: Immutable objects compared by value
- Exceptions: Domain-specific error handling
"""

from medbook.core.domain.entities import (
    AggregateRoot,
    Entity,
    SoftDeletableEntity,
    generate_uuid,
)
from medbook.core.domain.exceptions import (
    AuthorizationException,
    BusinessRuleViolationException,
    ConfigurationError,
    DomainException,
    EntityNotFoundException,
    ErrorKind,
    IntegrationException,
    InvalidTransitionException,
    SlotUnavailableError,
    ValidationException,
)
from medbook.core.domain.value_objects import (
    Money,
    StatusEnum,
    ValueObject,
)

__all__ = [
    # Entities
    "Entity",
    "AggregateRoot",
    "SoftDeletableEntity",
    "generate_uuid",
    # Value Objects
    "ValueObject",
    "Money",
    "StatusEnum",
    # Exceptions
    "ErrorKind",
    "DomainException",
    "ValidationException",
    "EntityNotFoundException",
    "BusinessRuleViolationException",
    "InvalidTransitionException",
    "AuthorizationException",
    "SlotUnavailableError",
    "ConfigurationError",
    "IntegrationException",
]
