"""RunService stage: keeps the daemon running and restarts it on demand."""

from __future__ import annotations

from typing import Any, ClassVar

from promprov.core.executor import ResourceExecutor
from promprov.models.plan import ResourceDirective, StageDirective
from promprov.models.reports import StageResult
from promprov.models.stages import Signal, Stage
from promprov.stages.base import BaseStage

RUNNING = "running"


def _started(before: dict[str, Any] | None, resource: ResourceDirective) -> bool:
    """Whether converging *resource* from *before* launched the process."""
    if resource.attrs.get("ensure", RUNNING) != RUNNING:
        return False
    return before is None or before.get("ensure", RUNNING) != RUNNING


class RunServiceStage(BaseStage):
    """Stage 3: converge the service; restart it when told to.

    A service the executor started in this run (newly created, or moved to
    ``running``) already runs the current binary and flags, so it gets no
    second restart. Any other change, such as flipping ``enable``, still
    restarts on a received ``restart``. A service kept stopped is never
    restarted.
    """

    stage: ClassVar[Stage] = Stage.RUN_SERVICE

    def execute(
        self,
        directive: StageDirective,
        executor: ResourceExecutor,
        received: frozenset[Signal],
    ) -> StageResult:
        refreshed: list[str] = []
        changed: list[str] = []
        for resource in directive.resources:
            before = executor.observed(resource)
            if executor.converge(resource):
                changed.append(resource.identity)
                if _started(before, resource):
                    continue
            if Signal.RESTART in received and resource.attrs.get("ensure", RUNNING) == RUNNING:
                executor.refresh(resource, Signal.RESTART)
                refreshed.append(resource.identity)

        return StageResult(
            stage=self.stage,
            changed=changed,
            received=sorted(received),
            refreshed=refreshed,
        )
