"""Constraint template store backed by per-category JSON directories."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Sequence
from pathlib import Path

from pydantic import ValidationError

from dsgs.config import settings
from dsgs.errors.exceptions import TemplateError
from dsgs.models.constraint import ConstraintTemplate

logger = logging.getLogger(__name__)

DEFAULT_PARTITIONS: tuple[str, ...] = ("security", "performance", "architecture")


class TemplateStore:
    """Reads constraint templates from ``<template_dir>/<partition>/*.json``.

    Partitions are optional: a missing or unreadable directory is skipped.
    A malformed template file is rejected on its own and logged; the rest of
    the scan continues. Templates are re-read on every call.
    """

    def __init__(
        self,
        template_dir: str | Path | None = None,
        partitions: Sequence[str] = DEFAULT_PARTITIONS,
    ) -> None:
        self.template_dir = Path(template_dir or settings.template_dir)
        self.partitions = tuple(partitions)

    def match_templates(self, task_type: str) -> list[ConstraintTemplate]:
        """Return templates applicable to *task_type* in partition, then file, order."""
        matched: list[ConstraintTemplate] = []
        for partition in self.partitions:
            for template in self._scan_partition(partition):
                if template.applies_to(task_type):
                    matched.append(template)
        logger.debug("Matched %d templates for task type %s", len(matched), task_type)
        return matched

    def _scan_partition(self, partition: str) -> Iterator[ConstraintTemplate]:
        directory = self.template_dir / partition
        try:
            files = sorted(p for p in directory.iterdir() if p.suffix == ".json")
        except OSError as exc:
            logger.debug("Skipping template partition %s: %s", directory, exc)
            return

        for path in files:
            try:
                yield load_template(path)
            except TemplateError as exc:
                logger.warning("template_rejected: %s", exc)


def load_template(path: Path) -> ConstraintTemplate:
    """Parse a single template file.

    Raises:
        TemplateError: If the file is unreadable, not JSON, or not a valid template.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise TemplateError(str(path), exc.strerror or str(exc)) from exc
    except json.JSONDecodeError as exc:
        raise TemplateError(str(path), f"invalid JSON: {exc.msg}") from exc
    try:
        return ConstraintTemplate.model_validate(raw)
    except ValidationError as exc:
        raise TemplateError(str(path), f"{exc.error_count()} validation error(s)") from exc
