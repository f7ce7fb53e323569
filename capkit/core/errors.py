"""Error types raised by the capability core."""
from __future__ import annotations

from typing import Any, List


class CapkitError(Exception):
    """Base class for capability errors."""


class UnsupportedCapability(CapkitError):
    """An entity was asked for a capability it never declared."""

    def __init__(self, entity_id: str, kind: str) -> None:
        self.entity_id = entity_id
        self.kind = kind
        super().__init__(f"Entity '{entity_id}' does not declare capability '{kind}'")


class CapabilityInvocationFailure(CapkitError):
    """Wraps an error raised inside an entity operation during fan-out."""

    def __init__(self, entity_id: str, kind: str, operation: str, cause: BaseException) -> None:
        self.entity_id = entity_id
        self.kind = kind
        self.operation = operation
        self.cause = cause
        super().__init__(f"{kind}.{operation} failed on '{entity_id}': {cause}")
        self.__cause__ = cause

    def to_dict(self) -> dict:
        return {
            "entity_id": self.entity_id,
            "kind": self.kind,
            "operation": self.operation,
            "error": str(self.cause),
            "error_type": type(self.cause).__name__,
        }


class SubstitutabilityError(CapkitError):
    """Raised on request when a substitutability check found violations."""

    def __init__(self, violations: List[Any]) -> None:
        self.violations = list(violations)
        lines = "\n".join(f"  - {v}" for v in self.violations)
        super().__init__(f"{len(self.violations)} substitutability violation(s):\n{lines}")
