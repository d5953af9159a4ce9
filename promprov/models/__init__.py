"""promprov data models: all Pydantic v2, all frozen (immutable)."""

from promprov.models.artifacts import AlertFileArtifact, ResolvedArtifact
from promprov.models.plan import (
    MergedConfig,
    ProvisioningPlan,
    ResourceDirective,
    ResourceKind,
    StageDirective,
)
from promprov.models.reports import RunReport, StageResult
from promprov.models.spec import InitStyle, InstallMethod, ProvisioningSpec
from promprov.models.stages import (
    RUNNING_STATES,
    STAGE_DISPLAY_NAMES,
    STAGE_ORDER,
    VALID_TRANSITIONS,
    NotificationRoute,
    RunState,
    Signal,
    Stage,
    StageTransition,
)

__all__ = [
    # spec
    "InitStyle",
    "InstallMethod",
    "ProvisioningSpec",
    # artifacts
    "AlertFileArtifact",
    "ResolvedArtifact",
    # stages
    "Stage",
    "RunState",
    "Signal",
    "NotificationRoute",
    "StageTransition",
    "STAGE_ORDER",
    "STAGE_DISPLAY_NAMES",
    "RUNNING_STATES",
    "VALID_TRANSITIONS",
    # plan
    "MergedConfig",
    "ProvisioningPlan",
    "ResourceDirective",
    "ResourceKind",
    "StageDirective",
    # reports
    "RunReport",
    "StageResult",
]
