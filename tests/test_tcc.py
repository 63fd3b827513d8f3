"""Tests for the Task Context Capsule model."""

import json

from dsgs.models.enums import DeploymentEnvironment, LoadLevel, Priority
from dsgs.models.tcc import MAX_TCC_SIZE, TaskContextCapsule, create_tcc, validate_tcc_size


def test_create_tcc_defaults():
    tcc = create_tcc("task-1", "Build login", "AUTHENTICATION")
    assert tcc.task_id == "task-1"
    assert tcc.goal == "Build login"
    assert tcc.task_type == "AUTHENTICATION"
    assert tcc.version == "1.0"
    assert tcc.context.relevant_constraints == []
    assert tcc.context.source == "user-request"
    assert tcc.context.priority == Priority.MEDIUM
    state = tcc.context.system_state
    assert state.load_level == LoadLevel.MED
    assert state.dependencies == []
    assert state.environment == DeploymentEnvironment.DEVELOPMENT
    assert (state.resource_availability.cpu, state.resource_availability.memory) == (50, 50)


def test_size_matches_serialized_length():
    tcc = create_tcc("task-1", "Build login", "AUTHENTICATION")
    assert tcc.size == len(tcc.to_json().encode("utf-8"))
    assert tcc.size < MAX_TCC_SIZE


def test_size_counts_bytes_not_characters():
    ascii_tcc = create_tcc("t", "aaaa", "API")
    utf8_tcc = create_tcc("t", "éééé", "API")
    assert utf8_tcc.size == ascii_tcc.size + 4


def test_size_recomputed_after_mutation():
    tcc = create_tcc("task-1", "goal", "API")
    before = tcc.size
    tcc.context.relevant_constraints = ["SEC-001", "PERF-002"]
    assert validate_tcc_size(tcc) is True
    assert tcc.size > before
    assert tcc.size == len(tcc.to_json().encode("utf-8"))


def test_oversized_tcc_fails_validation():
    tcc = create_tcc("task-1", "x" * MAX_TCC_SIZE, "API")
    assert validate_tcc_size(tcc) is False
    assert tcc.size >= MAX_TCC_SIZE
    assert tcc.size == len(tcc.to_json().encode("utf-8"))


def test_serialized_form_uses_camel_case():
    data = json.loads(create_tcc("task-1", "goal", "API").to_json())
    assert set(data) == {"taskId", "goal", "taskType", "context", "size", "version"}
    assert set(data["context"]) == {
        "relevantConstraints", "systemState", "creationTime", "source", "priority",
    }
    assert set(data["context"]["systemState"]) == {
        "loadLevel", "dependencies", "resourceAvailability", "environment",
    }


def test_document_round_trip():
    tcc = create_tcc("task-1", "goal", "DATABASE")
    tcc.context.relevant_constraints = ["PERF-001"]
    restored = TaskContextCapsule.model_validate(tcc.to_document())
    assert restored == tcc
