"""Evolution stage management.

The current stage is plain data (:class:`EvolutionState`). The manager holds
only the stage catalogue; every operation takes a state and returns a new one.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from dsgs.models.tcc import utc_now_iso

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvolutionStage:
    name: str
    version: str
    description: str
    features: tuple[str, ...]
    self_constraints: tuple[str, ...] = field(default_factory=tuple)
    # Conditions an operator must confirm before migrating into this stage.
    prerequisites: tuple[str, ...] = field(default_factory=tuple)


STAGES: tuple[EvolutionStage, ...] = (
    EvolutionStage(
        name="MVP",
        version="1.0",
        description="Minimum Viable Product - Core functionality implemented",
        features=(
            "Basic constraint generation",
            "Task Context Capsule support",
            "MCP integration",
            "CLI interface",
        ),
        self_constraints=("TCC size < 10KB", "Protocol limited to three methods"),
    ),
    EvolutionStage(
        name="ADAPTIVE",
        version="2.0",
        description="Constraint sets adapt to specification metadata and checker feedback",
        features=(
            "Specification-driven constraint merging",
            "Pluggable violation checkers",
            "System-state aware capsules",
        ),
        self_constraints=("TCC size < 10KB", "Checkers must be side-effect free"),
        prerequisites=("specification-metadata", "violation-checker"),
    ),
    EvolutionStage(
        name="AUTONOMOUS",
        version="3.0",
        description="Constraint governance runs unattended inside delivery pipelines",
        features=(
            "Continuous constraint enforcement",
            "Automatic template curation",
        ),
        self_constraints=("TCC size < 10KB", "Every migration is recorded in history"),
        prerequisites=("pipeline-integration",),
    ),
)


class StageTransition(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_stage: str = Field(alias="from")
    to_stage: str = Field(alias="to")
    at: str


class EvolutionState(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    current_stage: str = Field(alias="currentStage")
    entered_at: str = Field(alias="enteredAt")
    history: tuple[StageTransition, ...] = ()


@dataclass(frozen=True)
class MigrationOutcome:
    state: EvolutionState
    migrated: bool
    reason: str = ""


class EvolutionManager:
    """Resolves stages from a catalogue and computes migrations."""

    def __init__(self, stages: tuple[EvolutionStage, ...] = STAGES) -> None:
        if not stages:
            raise ValueError("At least one evolution stage is required")
        self._stages = stages
        self._index = {stage.name: i for i, stage in enumerate(stages)}

    @property
    def stages(self) -> tuple[EvolutionStage, ...]:
        return self._stages

    def initial_state(self) -> EvolutionState:
        return EvolutionState(current_stage=self._stages[0].name, entered_at=utc_now_iso())

    def current_stage(self, state: EvolutionState) -> EvolutionStage | None:
        index = self._index.get(state.current_stage)
        return self._stages[index] if index is not None else None

    def next_stage(self, state: EvolutionState) -> EvolutionStage | None:
        index = self._index.get(state.current_stage)
        if index is None or index + 1 >= len(self._stages):
            return None
        return self._stages[index + 1]

    def self_constraints(self, state: EvolutionState) -> list[str]:
        stage = self.current_stage(state)
        return list(stage.self_constraints) if stage else []

    def unmet_prerequisites(self, state: EvolutionState, confirmed: Iterable[str] = ()) -> list[str]:
        """Prerequisites of the next stage that are not in *confirmed*."""
        target = self.next_stage(state)
        if target is None:
            return []
        done = set(confirmed)
        return [p for p in target.prerequisites if p not in done]

    def migrate(self, state: EvolutionState, confirmed: Iterable[str] = ()) -> MigrationOutcome:
        """Advance *state* by one stage.

        Fails without changing *state* when the stage is unknown or final, or
        when the next stage has prerequisites missing from *confirmed*.
        """
        current = self.current_stage(state)
        if current is None:
            return MigrationOutcome(state, False, f"Unknown stage: {state.current_stage}")
        target = self.next_stage(state)
        if target is None:
            return MigrationOutcome(state, False, f"{current.name} is the final stage")
        unmet = self.unmet_prerequisites(state, confirmed)
        if unmet:
            return MigrationOutcome(
                state, False, f"Unmet prerequisites for {target.name}: {', '.join(unmet)}"
            )

        now = utc_now_iso()
        new_state = EvolutionState(
            current_stage=target.name,
            entered_at=now,
            history=state.history + (StageTransition(from_stage=current.name, to_stage=target.name, at=now),),
        )
        logger.info("Migrated evolution stage %s -> %s", current.name, target.name)
        return MigrationOutcome(new_state, True)


def load_state(path: Path, manager: EvolutionManager | None = None) -> EvolutionState:
    """Read persisted state; a missing or corrupt file yields the initial state."""
    manager = manager or EvolutionManager()
    if not path.exists():
        return manager.initial_state()
    try:
        return EvolutionState.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        logger.warning("Ignoring unreadable evolution state %s: %s", path, exc)
        return manager.initial_state()


def save_state(state: EvolutionState, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(state.model_dump(mode="json", by_alias=True), indent=2),
        encoding="utf-8",
    )
