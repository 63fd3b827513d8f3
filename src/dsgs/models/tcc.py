"""Pydantic model for the Task Context Capsule (TCC).

A TCC is the bounded-size record that drives constraint selection. Its JSON
form uses camelCase keys; ``size`` always holds the byte length of that JSON
form and is refreshed by :func:`validate_tcc_size`.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from dsgs.models.enums import DeploymentEnvironment, LoadLevel, Priority

MAX_TCC_SIZE = 10240
TCC_SCHEMA_VERSION = "1.0"
_SIZE_PASSES = 8


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResourceAvailability(_CamelModel):
    cpu: float = Field(50, ge=0, le=100)
    memory: float = Field(50, ge=0, le=100)
    network: float = Field(50, ge=0, le=100)


class SystemState(_CamelModel):
    load_level: LoadLevel = LoadLevel.MED
    dependencies: list[str] = Field(default_factory=list)
    resource_availability: ResourceAvailability = Field(default_factory=ResourceAvailability)
    environment: DeploymentEnvironment = DeploymentEnvironment.DEVELOPMENT


class TaskContext(_CamelModel):
    relevant_constraints: list[str] = Field(default_factory=list)
    system_state: SystemState = Field(default_factory=SystemState)
    creation_time: str = Field(default_factory=utc_now_iso)
    source: str = "user-request"
    priority: Priority = Priority.MEDIUM


class TaskContextCapsule(_CamelModel):
    task_id: str
    goal: str
    task_type: str
    context: TaskContext = Field(default_factory=TaskContext)
    size: int = 0
    version: str = TCC_SCHEMA_VERSION

    def to_json(self) -> str:
        """Compact camelCase JSON form, the form whose length is ``size``."""
        return self.model_dump_json(by_alias=True)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def validate_tcc_size(tcc: TaskContextCapsule) -> bool:
    """Recompute ``tcc.size`` and report whether it is under the limit.

    ``size`` is part of its own serialized form, so the measurement is
    repeated until the stored value matches the measured length.
    """
    for _ in range(_SIZE_PASSES):
        byte_size = len(tcc.to_json().encode("utf-8"))
        if byte_size == tcc.size:
            break
        tcc.size = byte_size
    return tcc.size < MAX_TCC_SIZE


def create_tcc(task_id: str, goal: str, task_type: str) -> TaskContextCapsule:
    """Create a TCC populated with defaults and a computed size."""
    tcc = TaskContextCapsule(task_id=task_id, goal=goal, task_type=task_type)
    validate_tcc_size(tcc)
    return tcc
