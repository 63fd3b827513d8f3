"""Pluggable violation checkers.

The protocol server does not analyse code. ``checkConstraints`` reports
whatever its configured checker returns, and the default checker returns
nothing. Real analysers plug in by implementing :class:`ViolationChecker`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from dsgs.models.constraint import Constraint, ConstraintViolation
from dsgs.models.enums import ViolationSeverity
from dsgs.models.tcc import TaskContextCapsule


class ViolationChecker(Protocol):
    def check(
        self, constraints: Sequence[Constraint], tcc: TaskContextCapsule
    ) -> list[ConstraintViolation]: ...


class NullViolationChecker:
    """Placeholder checker: always reports no violations."""

    def check(
        self, constraints: Sequence[Constraint], tcc: TaskContextCapsule
    ) -> list[ConstraintViolation]:
        return []


# task type -> (required constraint id, message, suggestion)
_REQUIRED_BY_TASK_TYPE: dict[str, tuple[str, str, str]] = {
    "FINANCIAL": (
        "SEC-003",
        "Financial task requires audit logging (SEC-003)",
        "Emit an audit record for every state-changing operation",
    ),
    "AUTHENTICATION": (
        "SEC-001",
        "Authentication task requires input validation (SEC-001)",
        "Validate credentials and tokens before use",
    ),
    "API": (
        "PERF-001",
        "API task should have caching strategy (PERF-001)",
        "Define a cache and invalidation policy for repeated reads",
    ),
}


class TaskTypeViolationChecker:
    """Flags task types whose mandatory constraint is absent from the set."""

    def check(
        self, constraints: Sequence[Constraint], tcc: TaskContextCapsule
    ) -> list[ConstraintViolation]:
        if not tcc.task_type:
            return []
        requirement = _REQUIRED_BY_TASK_TYPE.get(tcc.task_type.upper())
        if requirement is None:
            return []

        required_id, message, suggestion = requirement
        if any(c.id == required_id for c in constraints):
            return []
        return [
            ConstraintViolation(
                id=required_id,
                severity=ViolationSeverity.ERROR,
                message=message,
                suggestions=[suggestion],
                context={"taskId": tcc.task_id, "taskType": tcc.task_type},
            )
        ]
