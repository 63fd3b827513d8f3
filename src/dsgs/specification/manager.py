"""Specification service: load, save and validate specification documents.

Documents are JSON files validated against ``bsl.schema.json``. Both global
specifications and serialized task context capsules go through this service.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Any

import jsonschema

from dsgs.config import settings
from dsgs.errors.exceptions import LoadError, SaveError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LoadOutcome:
    """Result of a best-effort load: either a document or the failure reason."""

    document: dict[str, Any] | None
    error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.document is None


class SpecificationManager:
    """Reads, writes and schema-checks specification documents."""

    def __init__(self, schema_path: str | Path | None = None) -> None:
        self.schema_path = Path(schema_path or settings.schema_path)

    @cached_property
    def _validator(self) -> jsonschema.Draft7Validator:
        schema = json.loads(self.schema_path.read_text(encoding="utf-8"))
        jsonschema.Draft7Validator.check_schema(schema)
        return jsonschema.Draft7Validator(schema)

    def load(self, path: str | Path) -> dict[str, Any]:
        """Load and validate the document at *path*.

        Raises:
            LoadError: If the file cannot be read, is not JSON, or fails validation.
        """
        try:
            data = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise LoadError(str(path), exc.strerror or str(exc)) from exc
        try:
            document = json.loads(data)
        except json.JSONDecodeError as exc:
            raise LoadError(str(path), f"invalid JSON: {exc.msg}") from exc

        result = self.validate(document)
        if not result.is_valid:
            raise LoadError(str(path), f"Invalid specification: {', '.join(result.errors)}")
        return document

    def load_optional(self, path: str | Path) -> LoadOutcome:
        """Load *path*, reporting failure in the outcome instead of raising."""
        try:
            return LoadOutcome(document=self.load(path))
        except LoadError as exc:
            return LoadOutcome(document=None, error=str(exc))

    def save(self, document: Any, path: str | Path) -> None:
        """Write *document* as indented JSON to *path*.

        Raises:
            SaveError: If the document cannot be serialized or written.
        """
        target = Path(path)
        try:
            data = json.dumps(document, indent=2)
        except (TypeError, ValueError) as exc:
            raise SaveError(str(target), str(exc)) from exc
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(data, encoding="utf-8")
        except OSError as exc:
            raise SaveError(str(target), exc.strerror or str(exc)) from exc
        logger.debug("Saved specification to %s", target)

    def validate(self, document: Any) -> ValidationResult:
        """Validate *document* against the schema. Never raises."""
        try:
            errors = sorted(self._validator.iter_errors(document), key=lambda e: [str(p) for p in e.absolute_path])
        except (OSError, ValueError, jsonschema.SchemaError) as exc:
            return ValidationResult(is_valid=False, errors=[f"Schema validation failed: {exc}"])
        if errors:
            return ValidationResult(is_valid=False, errors=[_format_error(e) for e in errors])
        return ValidationResult(is_valid=True)


def _format_error(error: jsonschema.ValidationError) -> str:
    location = "/".join(str(p) for p in error.absolute_path)
    return f"{location}: {error.message}" if location else error.message
