"""ServiceReload stage: makes the running daemon re-read its config."""

from __future__ import annotations

from typing import ClassVar

from promprov.core.executor import ResourceExecutor
from promprov.models.plan import StageDirective
from promprov.models.reports import StageResult
from promprov.models.stages import Signal, Stage
from promprov.stages.base import BaseStage


class ServiceReloadStage(BaseStage):
    """Stage 4: refresh-only reload, triggered by config-file changes."""

    stage: ClassVar[Stage] = Stage.SERVICE_RELOAD

    def execute(
        self,
        directive: StageDirective,
        executor: ResourceExecutor,
        received: frozenset[Signal],
    ) -> StageResult:
        refreshed: list[str] = []
        if Signal.RELOAD in received:
            for resource in directive.resources:
                executor.refresh(resource, Signal.RELOAD)
                refreshed.append(resource.identity)
        return StageResult(
            stage=self.stage, received=sorted(received), refreshed=refreshed
        )
