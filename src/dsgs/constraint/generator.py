"""Constraint generation from a task context capsule."""

import logging

from dsgs.constraint.template_store import TemplateStore
from dsgs.errors.exceptions import GenerationError
from dsgs.models.constraint import Constraint
from dsgs.models.tcc import TaskContextCapsule

logger = logging.getLogger(__name__)


def generate_constraints(
    tcc: TaskContextCapsule,
    store: TemplateStore | None = None,
) -> list[Constraint]:
    """Build the ordered constraint list for *tcc*.

    Matched templates come first, in store order, followed by one synthesized
    constraint per ``context.relevant_constraints`` entry. Ids are not merged:
    a template and a context entry naming the same id both appear.

    Raises:
        GenerationError: If template matching fails.
    """
    store = store or TemplateStore()
    try:
        templates = store.match_templates(tcc.task_type)
    except Exception as exc:
        raise GenerationError(exc) from exc

    constraints = [Constraint.from_template(t) for t in templates]
    constraints.extend(
        Constraint.from_context_reference(constraint_id, tcc.task_type)
        for constraint_id in tcc.context.relevant_constraints
    )
    logger.info(
        "Generated %d constraints for task %s (%d from templates)",
        len(constraints),
        tcc.task_id,
        len(templates),
    )
    return constraints
