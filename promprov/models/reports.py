"""Run report models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from promprov.models.stages import RunState, Signal, Stage, StageTransition


class StageResult(BaseModel):
    """What one stage did to the host."""

    model_config = ConfigDict(frozen=True)

    stage: Stage
    changed: list[str] = []  # resource identities
    received: list[Signal] = []
    emitted: list[Signal] = []
    refreshed: list[str] = []  # resource identities refreshed by a signal


class RunReport(BaseModel):
    """Outcome of one provisioning run."""

    model_config = ConfigDict(frozen=True)

    plan_hash: str
    state: RunState
    results: list[StageResult] = []
    transitions: list[StageTransition] = []
    failed_stage: Stage | None = None
    error: str | None = None

    @property
    def changed(self) -> bool:
        """Whether any stage changed the host or refreshed a resource."""
        return any(r.changed or r.refreshed for r in self.results)
