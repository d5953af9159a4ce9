"""Provisioning error taxonomy.

Everything except ``StageFailure`` is raised during pre-flight resolution,
before the first stage touches the host.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from promprov.models.stages import Stage


class ProvisioningError(RuntimeError):
    """Base class for all provisioning errors."""


class UnsupportedArchitecture(ProvisioningError):
    """Raised when a raw architecture fact has no artifact mapping."""


class InvalidVersionFormat(ProvisioningError):
    """Raised when a version is not a three-component semantic version."""


class MergeTypeError(ProvisioningError, TypeError):
    """Raised when deep-merge inputs are not both mappings."""


class InvalidDefaultsLayer(ProvisioningError):
    """Raised when the site defaults layer is not a flat mapping of global settings."""


class DuplicateAlertFileName(ProvisioningError):
    """Raised when two alert file names collide after normalization."""


class InvalidAlertFileName(ProvisioningError):
    """Raised when an alert file name is empty or contains a path separator."""


class InvalidAlertRule(ProvisioningError):
    """Raised when an alert rule set does not have the shape its format needs."""


class MissingRequiredParameter(ProvisioningError):
    """Raised when a required provisioning parameter has no value."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Missing required parameter {name!r}")


class StageFailure(ProvisioningError):
    """Raised when a stage fails during orchestration.

    Carries the failing stage and the underlying cause. The chain halts;
    nothing converged so far is rolled back.
    """

    def __init__(self, stage: Stage, cause: BaseException) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"Stage {stage.value} failed: {cause}")
