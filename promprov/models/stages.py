"""Stage and run-state models: strictly linear provisioning chain."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Stage(str, Enum):
    """One ordered step of the provisioning chain."""

    INSTALL = "install"
    CONFIG = "config"
    RUN_SERVICE = "run_service"
    SERVICE_RELOAD = "service_reload"


class RunState(str, Enum):
    """State of a single provisioning run."""

    PENDING = "pending"
    INSTALL_RUNNING = "install_running"
    CONFIG_RUNNING = "config_running"
    SERVICE_RUNNING = "service_running"
    RELOAD_RUNNING = "reload_running"
    COMPLETE = "complete"
    FAILED = "failed"


class Signal(str, Enum):
    """Notification emitted by a changed resource."""

    RESTART = "restart"
    RELOAD = "reload"


STAGE_ORDER: list[Stage] = [
    Stage.INSTALL,
    Stage.CONFIG,
    Stage.RUN_SERVICE,
    Stage.SERVICE_RELOAD,
]

STAGE_DISPLAY_NAMES: dict[Stage, str] = {
    Stage.INSTALL: "Install",
    Stage.CONFIG: "Config",
    Stage.RUN_SERVICE: "Run Service",
    Stage.SERVICE_RELOAD: "Service Reload",
}

RUNNING_STATES: dict[Stage, RunState] = {
    Stage.INSTALL: RunState.INSTALL_RUNNING,
    Stage.CONFIG: RunState.CONFIG_RUNNING,
    Stage.RUN_SERVICE: RunState.SERVICE_RUNNING,
    Stage.SERVICE_RELOAD: RunState.RELOAD_RUNNING,
}

# Valid run-state transitions: enforced structurally by StageMachine.
# COMPLETE and FAILED are terminal.
VALID_TRANSITIONS: dict[RunState, set[RunState]] = {
    RunState.PENDING: {RunState.INSTALL_RUNNING},
    RunState.INSTALL_RUNNING: {RunState.CONFIG_RUNNING, RunState.FAILED},
    RunState.CONFIG_RUNNING: {RunState.SERVICE_RUNNING, RunState.FAILED},
    RunState.SERVICE_RUNNING: {RunState.RELOAD_RUNNING, RunState.FAILED},
    RunState.RELOAD_RUNNING: {RunState.COMPLETE, RunState.FAILED},
    RunState.COMPLETE: set(),
    RunState.FAILED: set(),
}


class NotificationRoute(BaseModel):
    """Wires a signal emitted in one stage to the stage that acts on it."""

    model_config = ConfigDict(frozen=True)

    source: Stage
    signal: Signal
    target: Stage


class StageTransition(BaseModel):
    """Records a single run-state transition."""

    model_config = ConfigDict(frozen=True)

    stage: Stage | None
    from_state: RunState
    to_state: RunState
    error: str | None = None
