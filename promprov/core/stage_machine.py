"""Linear run-state machine for one provisioning run.

Enforces:
- Valid state transitions only (VALID_TRANSITIONS table)
- A stage starts only after its predecessor succeeded
- FAILED is terminal and remembers the failing stage
- Every transition recorded in order
"""

from __future__ import annotations

import logging

from promprov.models.stages import (
    RUNNING_STATES,
    STAGE_ORDER,
    VALID_TRANSITIONS,
    RunState,
    Stage,
    StageTransition,
)

logger = logging.getLogger(__name__)


class InvalidTransitionError(RuntimeError):
    """Raised when a requested state transition is not valid."""


class StageMachine:
    """Tracks the run state ``pending -> ... -> complete | failed``."""

    def __init__(self) -> None:
        self._state = RunState.PENDING
        self._current: Stage | None = None
        self._current_done = False
        self._failed_stage: Stage | None = None
        self._transitions: list[StageTransition] = []

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def current_stage(self) -> Stage | None:
        """The stage currently running (or that failed), if any."""
        return self._current

    @property
    def failed_stage(self) -> Stage | None:
        return self._failed_stage

    @property
    def transitions(self) -> list[StageTransition]:
        """Return a snapshot of every transition so far."""
        return list(self._transitions)

    def can_start(self, stage: Stage) -> bool:
        """Whether *stage* may start from the current state."""
        return RUNNING_STATES[stage] in VALID_TRANSITIONS[self._state]

    # ------------------------------------------------------------------
    # Transition logic
    # ------------------------------------------------------------------

    def start(self, stage: Stage) -> None:
        """Enter *stage*'s running state; its predecessor must have succeeded."""
        if self._current is not None and not self._current_done:
            raise InvalidTransitionError(
                f"Cannot start {stage.value}: {self._current.value} has not succeeded"
            )
        self._transition(RUNNING_STATES[stage], stage)
        self._current = stage
        self._current_done = False

    def succeed(self, stage: Stage) -> None:
        """Mark *stage* done and move on (to COMPLETE after the last stage)."""
        if self._current != stage:
            raise InvalidTransitionError(
                f"Cannot complete {stage.value}: current stage is "
                f"{self._current.value if self._current else 'none'}"
            )
        self._current_done = True
        index = STAGE_ORDER.index(stage)
        if index == len(STAGE_ORDER) - 1:
            self._transition(RunState.COMPLETE, stage)
            self._current = None
        # Otherwise the next start() performs the hand-off transition.

    def fail(self, stage: Stage, error: str) -> None:
        """Halt the chain in FAILED, carrying *stage* and *error*."""
        self._transition(RunState.FAILED, stage, error=error)
        self._failed_stage = stage

    def _transition(
        self, target: RunState, stage: Stage | None, *, error: str | None = None
    ) -> None:
        allowed = VALID_TRANSITIONS.get(self._state, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition from {self._state.value} to {target.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )
        self._transitions.append(
            StageTransition(
                stage=stage, from_state=self._state, to_state=target, error=error
            )
        )
        logger.debug("%s -> %s", self._state.value, target.value)
        self._state = target
