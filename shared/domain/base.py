"""
Base Domain Classes

Value objects are immutable and compared by value. They carry the small
pieces of domain logic (money arithmetic) that should not live in views or
ORM models.
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass
