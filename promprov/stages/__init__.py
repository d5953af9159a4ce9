"""promprov provisioning stages: registry mapping Stage to stage class.

Usage::

    from promprov.stages import get_stage
    from promprov.models.stages import Stage

    stage = get_stage(Stage.CONFIG)
    result = stage.run_stage(plan.directive_for(Stage.CONFIG), executor)
"""

from __future__ import annotations

from promprov.models.stages import Stage
from promprov.stages.base import BaseStage, StageDirectiveError
from promprov.stages.config import ConfigStage
from promprov.stages.install import InstallStage
from promprov.stages.run_service import RunServiceStage
from promprov.stages.service_reload import ServiceReloadStage

STAGE_REGISTRY: dict[Stage, type[BaseStage]] = {
    Stage.INSTALL: InstallStage,
    Stage.CONFIG: ConfigStage,
    Stage.RUN_SERVICE: RunServiceStage,
    Stage.SERVICE_RELOAD: ServiceReloadStage,
}


def get_stage(stage: Stage) -> BaseStage:
    """Instantiate and return the stage implementation for *stage*."""
    try:
        cls = STAGE_REGISTRY[stage]
    except KeyError:
        raise KeyError(
            f"Unknown stage {stage!r}. "
            f"Registered stages: {[s.value for s in STAGE_REGISTRY]}"
        ) from None
    return cls()


__all__ = [
    "BaseStage",
    "StageDirectiveError",
    "STAGE_REGISTRY",
    "get_stage",
    "InstallStage",
    "ConfigStage",
    "RunServiceStage",
    "ServiceReloadStage",
]
