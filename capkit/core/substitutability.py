"""
Substitutability checks.

Exercises every operation of a capability on each candidate entity, in each
of the entity's declared states, and collects every case where the entity
raised or produced a result outside the operation's postcondition.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .capability import Capability
from .entity import Entity
from .errors import SubstitutabilityError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Violation:
    entity_id: str
    state: Optional[str]
    operation: Optional[str]
    reason: str

    def __str__(self) -> str:
        where = self.entity_id
        if self.state is not None:
            where += f" [{self.state}]"
        if self.operation is not None:
            where += f" .{self.operation}()"
        return f"{where}: {self.reason}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "state": self.state,
            "operation": self.operation,
            "reason": self.reason,
        }


@dataclass
class SubstitutabilityReport:
    kind: str
    violations: List[Violation] = field(default_factory=list)
    checked: int = 0

    @property
    def ok(self) -> bool:
        return not self.violations

    def for_entity(self, entity_id: str) -> List[Violation]:
        return [v for v in self.violations if v.entity_id == entity_id]

    def raise_for_violations(self) -> None:
        if self.violations:
            raise SubstitutabilityError(self.violations)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "ok": self.ok,
            "checked": self.checked,
            "violations": [v.to_dict() for v in self.violations],
        }


class SubstitutabilityChecker:
    """Checks that entities declaring a capability can stand in for one another.

    ``states`` optionally restricts which internal states are exercised. An
    entity that declares none of them is exercised in all of its own states,
    so no candidate passes without being called.
    """

    def __init__(self, states: Optional[Sequence[str]] = None) -> None:
        self.states = tuple(states) if states else None

    def check(self, capability: Capability, entities: Iterable[Entity]) -> SubstitutabilityReport:
        report = SubstitutabilityReport(capability.kind)
        for entity in entities:
            self._check_entity(capability, entity, report)
        if report.violations:
            logger.warning(
                "%d substitutability violation(s) for %s", len(report.violations), capability.kind
            )
        return report

    def _check_entity(self, capability: Capability, entity: Entity, report: SubstitutabilityReport) -> None:
        if not entity.implements_capability(capability.kind):
            report.violations.append(
                Violation(entity.entity_id, None, None, f"does not declare '{capability.kind}'")
            )
            return
        if entity.capability(capability.kind) != capability:
            report.violations.append(
                Violation(entity.entity_id, None, None, f"declares a different '{capability.kind}' contract")
            )
            return

        original = entity.state
        states = [s for s in entity.states if self.states is None or s in self.states]
        if not states:
            logger.debug("No filtered state declared by %s, checking all of its states", entity.entity_id)
            states = list(entity.states)
        try:
            for state in states:
                entity.enter_state(state)
                handle = entity.as_capability(capability.kind)
                for operation in capability.operations:
                    report.checked += 1
                    try:
                        result = handle.invoke(operation.name, *operation.sample_args, **operation.sample_kwargs)
                    except Exception as exc:
                        report.violations.append(Violation(
                            entity.entity_id, state, operation.name,
                            f"raised {type(exc).__name__}: {exc}",
                        ))
                        continue
                    try:
                        satisfied = operation.postcondition(result)
                    except Exception as exc:
                        report.violations.append(Violation(
                            entity.entity_id, state, operation.name,
                            f"postcondition raised {type(exc).__name__}: {exc}",
                        ))
                        continue
                    if not satisfied:
                        report.violations.append(Violation(
                            entity.entity_id, state, operation.name,
                            f"result {result!r} fails postcondition",
                        ))
        finally:
            entity.enter_state(original)
