"""Config stage: rules directory, alert files, config file, service definition."""

from __future__ import annotations

from typing import ClassVar

from promprov.core.executor import ResourceExecutor
from promprov.models.plan import StageDirective
from promprov.models.reports import StageResult
from promprov.models.stages import Signal, Stage
from promprov.stages.base import BaseStage


class ConfigStage(BaseStage):
    """Stage 2: materialize configuration.

    Config-file changes emit ``reload``; service-definition changes emit
    ``restart`` when restart-on-change wired them to.
    """

    stage: ClassVar[Stage] = Stage.CONFIG

    def execute(
        self,
        directive: StageDirective,
        executor: ResourceExecutor,
        received: frozenset[Signal],
    ) -> StageResult:
        changed, emitted = self.converge_all(directive.resources, executor)
        return StageResult(
            stage=self.stage, changed=changed, received=sorted(received), emitted=emitted
        )
