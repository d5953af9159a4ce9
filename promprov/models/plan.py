"""Plan models: the declarative target state handed to the executor."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from promprov.models.artifacts import AlertFileArtifact, ResolvedArtifact
from promprov.models.spec import ProvisioningSpec
from promprov.models.stages import NotificationRoute, Signal, Stage


class ResourceKind(str, Enum):
    """Kinds of idempotent "ensure" instructions."""

    GROUP = "group"
    USER = "user"
    DIRECTORY = "directory"
    FILE = "file"
    SYMLINK = "symlink"
    ARCHIVE = "archive"
    PACKAGE = "package"
    SERVICE_DEFINITION = "service_definition"
    SERVICE = "service"
    EXEC = "exec"


class ResourceDirective(BaseModel):
    """A single resource the executor must converge.

    ``notify`` names the signal emitted when converging this resource
    changed the host. ``None`` means the change is silent.
    """

    model_config = ConfigDict(frozen=True)

    kind: ResourceKind
    name: str
    content: str | None = None
    owner: str | None = None
    group: str | None = None
    mode: str | None = None
    attrs: dict[str, Any] = {}
    notify: Signal | None = None

    @property
    def identity(self) -> str:
        """Stable key the executor uses to track this resource."""
        return f"{self.kind.value}:{self.name}"


class StageDirective(BaseModel):
    """Ordered resources owned by one stage, plus a summary payload."""

    model_config = ConfigDict(frozen=True)

    stage: Stage
    resources: list[ResourceDirective] = []
    payload: dict[str, Any] = {}


class MergedConfig(BaseModel):
    """Final runtime configuration of the daemon."""

    model_config = ConfigDict(frozen=True)

    global_config: dict[str, Any]
    rule_files: list[str]
    scrape_configs: list[dict[str, Any]] = []
    remote_read_configs: list[dict[str, Any]] = []
    remote_write_configs: list[dict[str, Any]] = []
    alerting: dict[str, Any] = {}


class ProvisioningPlan(BaseModel):
    """Everything pre-flight resolution produced for one run."""

    model_config = ConfigDict(frozen=True)

    spec: ProvisioningSpec
    artifact: ResolvedArtifact
    merged_config: MergedConfig
    config_text: str
    alert_files: list[AlertFileArtifact]
    daemon_flags: list[str]
    stages: list[StageDirective]
    routes: list[NotificationRoute] = Field(default_factory=list)
    plan_hash: str = ""

    def directive_for(self, stage: Stage) -> StageDirective:
        """Return the directive for *stage*; empty if the plan has none."""
        for directive in self.stages:
            if directive.stage == stage:
                return directive
        return StageDirective(stage=stage)

    def routes_from(self, stage: Stage, signal: Signal) -> list[NotificationRoute]:
        """Return the routes carrying *signal* out of *stage*."""
        return [r for r in self.routes if r.source == stage and r.signal == signal]
