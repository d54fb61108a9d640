"""Specification pattern for reusable query logic over entities."""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Sequence


class Specification(ABC):
    """Abstract base for specifications (query filters)."""

    @abstractmethod
    def is_satisfied_by(self, candidate: Any) -> bool:
        """Check if candidate satisfies this specification."""
        pass

    def __call__(self, candidate: Any) -> bool:
        return self.is_satisfied_by(candidate)

    def and_(self, other: Specification) -> Specification:
        """Combine with AND logic."""
        return AndSpecification(self, other)

    def or_(self, other: Specification) -> Specification:
        """Combine with OR logic."""
        return OrSpecification(self, other)

    def not_(self) -> Specification:
        """Negate this specification."""
        return NotSpecification(self)


class AndSpecification(Specification):
    """AND composite specification."""

    def __init__(self, left: Specification, right: Specification):
        self.left = left
        self.right = right

    def is_satisfied_by(self, candidate: Any) -> bool:
        return self.left.is_satisfied_by(candidate) and self.right.is_satisfied_by(candidate)


class OrSpecification(Specification):
    """OR composite specification."""

    def __init__(self, left: Specification, right: Specification):
        self.left = left
        self.right = right

    def is_satisfied_by(self, candidate: Any) -> bool:
        return self.left.is_satisfied_by(candidate) or self.right.is_satisfied_by(candidate)


class NotSpecification(Specification):
    """NOT specification."""

    def __init__(self, spec: Specification):
        self.spec = spec

    def is_satisfied_by(self, candidate: Any) -> bool:
        return not self.spec.is_satisfied_by(candidate)


class MatchAll(Specification):
    """Satisfied by every candidate."""

    def is_satisfied_by(self, candidate: Any) -> bool:
        return True


# Field specifications

class FieldEquals(Specification):
    """Exact equality on one attribute. Used for enum fields."""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value

    def is_satisfied_by(self, candidate: Any) -> bool:
        return getattr(candidate, self.field, None) == self.value


class FieldEqualsIgnoreCase(Specification):
    """Case-insensitive string equality on one attribute; None never matches."""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value.casefold()

    def is_satisfied_by(self, candidate: Any) -> bool:
        actual = getattr(candidate, self.field, None)
        if actual is None:
            return False
        if isinstance(actual, Enum):
            actual = actual.value
        return str(actual).casefold() == self.value


class TextSearch(Specification):
    """
    Case-insensitive substring search across several attributes.

    Args:
        term: Search term
        fields: Scalar string attributes to search
        list_fields: Attributes holding lists of strings (e.g. tags)
    """

    def __init__(self, term: str, fields: Sequence[str], list_fields: Sequence[str] = ()):
        self.term = term.lower()
        self.fields = tuple(fields)
        self.list_fields = tuple(list_fields)

    def is_satisfied_by(self, candidate: Any) -> bool:
        for field in self.fields:
            value = getattr(candidate, field, None)
            if value and self.term in str(value).lower():
                return True
        for field in self.list_fields:
            for value in getattr(candidate, field, None) or []:
                if self.term in str(value).lower():
                    return True
        return False

