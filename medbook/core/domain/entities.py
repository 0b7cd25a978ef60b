"""
Base Entity Classes for Domain-Driven Design

Entities are domain objects with identity and lifecycle.
They maintain their identity regardless of their attributes.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Generic, TypeVar
from uuid import UUID, uuid4

# Type variable for entity ID (int, str, UUID, etc.)
TId = TypeVar("TId")


@dataclass
class Entity(ABC, Generic[TId]):
    """
    Base class for all domain entities.

    An entity is a domain object that has a distinct identity
    that runs through time and different states.

    Type Parameters:
        TId: Type of entity identifier (int, str, UUID)

    Example:
        ```python
        @dataclass
        class ScheduleOverride(Entity[UUID]):
            doctor_id: UUID
            override_date: date
        ```
    """

    id: TId | None = field(default=None)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __eq__(self, other: object) -> bool:
        """Entities are equal if they have the same ID."""
        if not isinstance(other, Entity):
            return False
        if self.id is None or other.id is None:
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on ID for use in sets and dicts."""
        return hash(self.id) if self.id is not None else id(self)

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.now(UTC)


@dataclass
class AggregateRoot(Entity[TId], Generic[TId]):
    """
    Base class for aggregate roots.

    An aggregate root is the entry point to an aggregate.
    It controls access to all members of the aggregate
    and ensures invariants are maintained.

    The version counter counts state changes and is returned to clients.
    Repositories compare-and-swap on the status column, not on version.
    """

    version: int = field(default=0)

    def increment_version(self) -> None:
        """Count one more state change."""
        self.version += 1


@dataclass
class SoftDeletableEntity(Entity[TId], Generic[TId]):
    """
    Entity with soft delete support.

    Instead of physical deletion, marks entity as inactive.
    """

    deleted_at: datetime | None = field(default=None)
    is_active: bool = field(default=True)

    def soft_delete(self) -> None:
        """Mark entity as deleted."""
        self.deleted_at = datetime.now(UTC)
        self.is_active = False
        self.touch()


def generate_uuid() -> UUID:
    """Generate a new UUID for entity identification."""
    return uuid4()
