"""Install stage: user, group, daemon archive and on-host layout."""

from __future__ import annotations

from typing import ClassVar

from promprov.core.executor import ResourceExecutor
from promprov.models.plan import StageDirective
from promprov.models.reports import StageResult
from promprov.models.spec import InstallMethod
from promprov.models.stages import Signal, Stage
from promprov.stages.base import BaseStage


class InstallStage(BaseStage):
    """Stage 1: fetch and unpack the daemon, create its user and directories."""

    stage: ClassVar[Stage] = Stage.INSTALL

    def execute(
        self,
        directive: StageDirective,
        executor: ResourceExecutor,
        received: frozenset[Signal],
    ) -> StageResult:
        method = directive.payload.get("install_method", InstallMethod.URL.value)
        if method == InstallMethod.PACKAGE.value:
            raise NotImplementedError(
                "install_method 'package' is not supported; use 'url' or 'none'"
            )

        changed, emitted = self.converge_all(directive.resources, executor)
        return StageResult(
            stage=self.stage, changed=changed, received=sorted(received), emitted=emitted
        )
