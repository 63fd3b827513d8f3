"""Task Context Capsule generation and system-state refresh."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from dsgs.config import settings
from dsgs.errors.exceptions import SizeExceededError
from dsgs.models.enums import DeploymentEnvironment, LoadLevel, Priority
from dsgs.models.tcc import (
    MAX_TCC_SIZE,
    ResourceAvailability,
    SystemState,
    TaskContextCapsule,
    create_tcc,
    utc_now_iso,
    validate_tcc_size,
)
from dsgs.specification.manager import SpecificationManager

logger = logging.getLogger(__name__)

# Relevant constraints by uppercased task type
TASK_TYPE_CONSTRAINTS: dict[str, tuple[str, ...]] = {
    "FINANCIAL": ("SEC-002", "SEC-003", "PERF-002"),
    "AUTHENTICATION": ("SEC-001", "SEC-002"),
    "API": ("PERF-001", "PERF-002", "ARCH-002"),
    "DATABASE": ("PERF-001", "ARCH-002"),
}
DEFAULT_TASK_CONSTRAINTS: tuple[str, ...] = ("SEC-001",)


class SystemMetricsProvider(Protocol):
    def snapshot(self) -> SystemState: ...


class StaticSystemMetrics:
    """Fixed system-state snapshot used until real metrics are wired in."""

    def __init__(self, environment: str | None = None) -> None:
        self.environment = DeploymentEnvironment(environment or settings.environment)

    def snapshot(self) -> SystemState:
        return SystemState(
            load_level=LoadLevel.MED,
            dependencies=["core-service", "database"],
            resource_availability=ResourceAvailability(cpu=50, memory=50, network=50),
            environment=self.environment,
        )


def generate_tcc(
    task_id: str,
    goal: str,
    task_type: str,
    source: str = "user-request",
    priority: Priority | str = Priority.MEDIUM,
    *,
    spec_manager: SpecificationManager | None = None,
    global_spec_path: str | Path | None = None,
) -> TaskContextCapsule:
    """Build a TCC with relevant constraints derived from the task type.

    The global specification is loaded best-effort: if it cannot be loaded,
    the capsule is returned with no relevant constraints and a warning is
    logged.

    Raises:
        SizeExceededError: If the finished TCC serializes to 10240 bytes or more.
    """
    tcc = create_tcc(task_id, goal, task_type)
    tcc.context.source = source
    tcc.context.priority = Priority(priority)

    spec_manager = spec_manager or SpecificationManager()
    outcome = spec_manager.load_optional(global_spec_path or settings.global_spec_path)
    if outcome.degraded:
        logger.warning(
            "Could not load global specification for constraint extraction: %s",
            outcome.error,
        )
        tcc.context.relevant_constraints = []
    else:
        tcc.context.relevant_constraints = relevant_constraints_for(task_type, outcome.document)

    if not validate_tcc_size(tcc):
        raise SizeExceededError(tcc.size, MAX_TCC_SIZE)
    return tcc


def relevant_constraints_for(task_type: str, specification: dict | None) -> list[str]:
    """Task-type table entries plus specification extras, first occurrence kept."""
    ids = list(TASK_TYPE_CONSTRAINTS.get(task_type.upper(), DEFAULT_TASK_CONSTRAINTS))

    task_constraints = ((specification or {}).get("metadata") or {}).get("taskConstraints") or {}
    ids.extend(task_constraints.get(task_type) or [])

    return list(dict.fromkeys(ids))


def update_tcc_with_system_state(
    tcc: TaskContextCapsule,
    metrics: SystemMetricsProvider | None = None,
) -> bool:
    """Replace ``context.system_state`` with a fresh snapshot.

    Re-stamps ``creation_time`` and recomputes ``size``. Returns False, and
    leaves the TCC untouched, if the snapshot cannot be taken.
    """
    try:
        state = (metrics or StaticSystemMetrics()).snapshot()
    except Exception as exc:
        logger.warning("Could not update TCC with system state: %s", exc)
        return False

    tcc.context.system_state = state
    tcc.context.creation_time = utc_now_iso()
    validate_tcc_size(tcc)
    return True
