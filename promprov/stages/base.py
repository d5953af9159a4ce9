"""Abstract base stage with an enforced lifecycle.

Every concrete stage inherits from BaseStage and implements only
``execute()``. The ``run_stage()`` wrapper is **not overridable**; it
enforces the canonical ordering:

    check directive -> execute -> log outcome

Stages never touch the host directly. They hand resources to the
``ResourceExecutor`` and report which resources changed and which signals
those changes emitted.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Iterable
from typing import ClassVar, final

from promprov.core.executor import ResourceExecutor
from promprov.models.plan import ResourceDirective, StageDirective
from promprov.models.reports import StageResult
from promprov.models.stages import STAGE_DISPLAY_NAMES, Signal, Stage

logger = logging.getLogger(__name__)


class StageDirectiveError(RuntimeError):
    """Raised when a stage is handed another stage's directive."""


class BaseStage(abc.ABC):
    """Abstract base for the four provisioning stages.

    Subclasses **must** set ``stage`` and implement ``execute()``.
    Subclasses **must not** override ``run_stage()``.
    """

    stage: ClassVar[Stage]

    @property
    def display_name(self) -> str:
        return STAGE_DISPLAY_NAMES[self.stage]

    @abc.abstractmethod
    def execute(
        self,
        directive: StageDirective,
        executor: ResourceExecutor,
        received: frozenset[Signal],
    ) -> StageResult:
        """Converge the stage's resources.

        Parameters
        ----------
        directive:
            The stage's resources and payload from the plan.
        executor:
            Applies resources to the host.
        received:
            Signals routed to this stage by upstream changes in this run.
        """
        ...

    # ------------------------------------------------------------------
    # Lifecycle (NOT overridable)
    # ------------------------------------------------------------------

    @final
    def run_stage(
        self,
        directive: StageDirective,
        executor: ResourceExecutor,
        received: Iterable[Signal] = (),
    ) -> StageResult:
        """Execute the full stage lifecycle.  **Do not override.**"""
        if directive.stage != self.stage:
            raise StageDirectiveError(
                f"{type(self).__name__} cannot run the {directive.stage.value} directive"
            )

        inbox = frozenset(received)
        logger.info(
            "%s [%s] %d resources, received=%s",
            self.display_name,
            self.stage.value,
            len(directive.resources),
            sorted(s.value for s in inbox) or "-",
        )
        result = self.execute(directive, executor, inbox)
        logger.info(
            "%s [%s] changed=%d emitted=%s refreshed=%d",
            self.display_name,
            self.stage.value,
            len(result.changed),
            sorted(s.value for s in result.emitted) or "-",
            len(result.refreshed),
        )
        return result

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    @final
    def converge_all(
        self,
        resources: Iterable[ResourceDirective],
        executor: ResourceExecutor,
    ) -> tuple[list[str], list[Signal]]:
        """Converge *resources* in order.

        Returns the identities that changed and the distinct signals their
        changes emitted, in first-emitted order.
        """
        changed: list[str] = []
        emitted: list[Signal] = []
        for resource in resources:
            if executor.converge(resource):
                changed.append(resource.identity)
                if resource.notify is not None and resource.notify not in emitted:
                    emitted.append(resource.notify)
        return changed, emitted

    def __repr__(self) -> str:
        return f"<{type(self).__name__} stage={self.stage.value!r}>"
