"""Resource executor protocol and the recording (dry-run) executor.

The provisioning core never touches the host itself. Each stage hands its
resources to a ``ResourceExecutor`` which converges them idempotently and
reports whether anything changed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from promprov.core.hasher import resource_fingerprint
from promprov.models.plan import ResourceDirective
from promprov.models.stages import Signal

logger = logging.getLogger(__name__)


@runtime_checkable
class ResourceExecutor(Protocol):
    """Applies resources to a host.

    Implementations must be idempotent: converging a resource already in its
    desired state returns ``False`` and does nothing.
    """

    def converge(self, resource: ResourceDirective) -> bool:
        """Bring *resource* to its desired state; return whether it changed."""
        ...

    def refresh(self, resource: ResourceDirective, signal: Signal) -> None:
        """Act on *signal* for *resource* (restart a service, run a reload)."""
        ...

    def observed(self, resource: ResourceDirective) -> dict[str, Any] | None:
        """Return the attributes *resource* was last converged with, or ``None``."""
        ...


class ExecutorEvent(BaseModel):
    """One thing the recording executor did."""

    model_config = ConfigDict(frozen=True)

    action: str  # "create", "update", "refresh"
    identity: str
    signal: Signal | None = None


class RecordingExecutor:
    """In-memory executor that records instead of applying.

    State maps resource identity to the fingerprint and attributes of its
    last converged desired state. With *state_path* set, that state is
    loaded on start and written back after every change, so separate
    invocations converge against the same simulated host.
    """

    def __init__(self, state_path: Path | None = None) -> None:
        self._state_path = state_path
        self.state: dict[str, dict[str, Any]] = {}
        self.events: list[ExecutorEvent] = []
        if state_path is not None and state_path.exists():
            self.state = json.loads(state_path.read_text(encoding="utf-8"))

    def converge(self, resource: ResourceDirective) -> bool:
        # Refresh-only resources exist solely to be signalled.
        if resource.attrs.get("refreshonly"):
            return False

        desired = resource.model_dump(mode="json")
        fingerprint = resource_fingerprint(desired)
        previous = self.state.get(resource.identity)
        if previous is not None and previous["fingerprint"] == fingerprint:
            return False

        action = "create" if previous is None else "update"
        self.state[resource.identity] = {
            "fingerprint": fingerprint,
            "attrs": desired["attrs"],
        }
        self.events.append(ExecutorEvent(action=action, identity=resource.identity))
        logger.info("%s %s", action, resource.identity)
        self._save()
        return True

    def refresh(self, resource: ResourceDirective, signal: Signal) -> None:
        self.events.append(
            ExecutorEvent(action="refresh", identity=resource.identity, signal=signal)
        )
        logger.info("%s %s", signal.value, resource.identity)

    def observed(self, resource: ResourceDirective) -> dict[str, Any] | None:
        entry = self.state.get(resource.identity)
        return dict(entry["attrs"]) if entry is not None else None

    def _save(self) -> None:
        if self._state_path is None:
            return
        self._state_path.parent.mkdir(parents=True, exist_ok=True)
        self._state_path.write_text(
            json.dumps(self.state, sort_keys=True, indent=2), encoding="utf-8"
        )
