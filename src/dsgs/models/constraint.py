"""Pydantic models for constraint templates, constraints and violations."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from dsgs.models.enums import ConstraintCategory, ConstraintSeverity, ViolationSeverity
from dsgs.models.tcc import utc_now_iso

ALL_TASKS = "ALL"


class ConstraintTemplate(BaseModel):
    """Reusable rule definition loaded from a template file. Immutable."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    category: ConstraintCategory
    description: str
    rule: str
    applicable_tasks: list[str]
    severity: ConstraintSeverity

    def applies_to(self, task_type: str) -> bool:
        """Case-sensitive membership test, with ``ALL`` as wildcard."""
        return task_type in self.applicable_tasks or ALL_TASKS in self.applicable_tasks


class Constraint(BaseModel):
    """A constraint enforced for one task."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    category: ConstraintCategory
    description: str
    rule: str
    applicable_tasks: list[str]
    severity: ConstraintSeverity

    @classmethod
    def from_template(cls, template: ConstraintTemplate) -> "Constraint":
        return cls(
            id=template.id,
            name=template.name,
            category=template.category,
            description=template.description,
            rule=template.rule,
            applicable_tasks=list(template.applicable_tasks),
            severity=template.severity,
        )

    @classmethod
    def from_context_reference(cls, constraint_id: str, task_type: str) -> "Constraint":
        return cls(
            id=constraint_id,
            name=constraint_id,
            category=ConstraintCategory.OTHER,
            description="Constraint from task context",
            rule=f"context.{constraint_id}",
            applicable_tasks=[task_type],
            severity=ConstraintSeverity.WARNING,
        )


class ConstraintViolation(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    severity: ViolationSeverity
    message: str
    suggestions: list[str] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=utc_now_iso)
