"""Tests for the specification service (load / save / validate)."""

import pytest

from dsgs.errors.exceptions import LoadError, SaveError
from dsgs.specification.manager import SpecificationManager


def test_load_valid_document(spec_manager, spec_path):
    document = spec_manager.load(spec_path)
    assert document["name"] == "project spec"


def test_load_missing_file(spec_manager, tmp_path):
    with pytest.raises(LoadError, match="Failed to load specification from"):
        spec_manager.load(tmp_path / "missing.json")


def test_load_invalid_json(spec_manager, tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(LoadError, match="invalid JSON"):
        spec_manager.load(path)


def test_load_rejects_schema_violation(spec_manager, tmp_path):
    path = tmp_path / "bad.json"
    path.write_text('{"metadata": {"taskConstraints": {"API": "PERF-001"}}}', encoding="utf-8")
    with pytest.raises(LoadError, match="Invalid specification"):
        spec_manager.load(path)


def test_load_rejects_non_object(spec_manager, tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(LoadError):
        spec_manager.load(path)


def test_save_then_load(spec_manager, tmp_path):
    path = tmp_path / "nested" / "out.json"
    spec_manager.save({"version": "2.0", "metadata": {"taskConstraints": {"API": ["X-1"]}}}, path)
    assert spec_manager.load(path)["metadata"]["taskConstraints"]["API"] == ["X-1"]
    assert path.read_text(encoding="utf-8").startswith("{\n  ")


def test_save_unserializable_document(spec_manager, tmp_path):
    with pytest.raises(SaveError, match="Failed to save specification to"):
        spec_manager.save({"bad": object()}, tmp_path / "out.json")


def test_validate_reports_errors(spec_manager):
    result = spec_manager.validate({"version": 3})
    assert result.is_valid is False
    assert any("version" in e for e in result.errors)


def test_validate_accepts_any_object(spec_manager):
    assert spec_manager.validate({"anything": True}).is_valid is True


def test_validate_with_missing_schema_never_raises(tmp_path):
    manager = SpecificationManager(tmp_path / "no-schema.json")
    result = manager.validate({})
    assert result.is_valid is False
    assert result.errors[0].startswith("Schema validation failed")


def test_load_optional_degrades(spec_manager, tmp_path):
    outcome = spec_manager.load_optional(tmp_path / "missing.json")
    assert outcome.degraded
    assert "missing.json" in outcome.error


def test_load_optional_success(spec_manager, spec_path):
    outcome = spec_manager.load_optional(spec_path)
    assert not outcome.degraded
    assert outcome.error is None
