"""Stage orchestrator: runs a plan's stages as a strict linear chain.

Install -> Config -> RunService -> ServiceReload. Each stage starts only
after its predecessor succeeded. A failing stage halts the chain in FAILED;
nothing already converged is rolled back, and re-running the same plan is
safe because every resource converges idempotently.

Signals emitted by changed resources travel along the plan's routes, which
were fixed before execution. The orchestrator never decides on its own
whether a restart is warranted.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from promprov.core.errors import StageFailure
from promprov.core.executor import ResourceExecutor
from promprov.core.planner import build_plan
from promprov.core.stage_machine import StageMachine
from promprov.models.plan import ProvisioningPlan
from promprov.models.reports import RunReport, StageResult
from promprov.models.spec import ProvisioningSpec
from promprov.models.stages import STAGE_ORDER, RunState, Signal, Stage
from promprov.stages import BaseStage, get_stage

logger = logging.getLogger(__name__)


class StageOrchestrator:
    """Runs provisioning plans against a resource executor.

    Parameters
    ----------
    executor:
        Applies resources to the host.
    stages:
        Stage implementations by ``Stage``. Defaults to the registry.
    """

    def __init__(
        self,
        executor: ResourceExecutor,
        *,
        stages: Mapping[Stage, BaseStage] | None = None,
    ) -> None:
        self.executor = executor
        self._stages: dict[Stage, BaseStage] = (
            dict(stages) if stages is not None else {s: get_stage(s) for s in STAGE_ORDER}
        )
        self.machine = StageMachine()
        self.report: RunReport | None = None

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def provision(
        self,
        spec: ProvisioningSpec,
        defaults: Mapping[str, Any] | None = None,
    ) -> RunReport:
        """Plan *spec* and run it.

        Pre-flight errors propagate from ``build_plan`` before any stage
        starts.
        """
        return self.run(build_plan(spec, defaults=defaults))

    def run(self, plan: ProvisioningPlan) -> RunReport:
        """Execute every stage of *plan* in order.

        Returns the RunReport on success. Raises ``StageFailure`` carrying
        the failing stage and cause otherwise; ``self.report`` then holds the
        FAILED report.

        A failure neither rolls back converged resources nor keeps the
        signals they emitted. If Config changed a file and RunService then
        failed, the pending reload is lost: the next run finds the file
        already converged and sends nothing. Re-running converges resources
        but does not replay refreshes.
        """
        self.machine = StageMachine()
        inboxes: dict[Stage, list[Signal]] = {s: [] for s in STAGE_ORDER}
        results: list[StageResult] = []

        for stage in STAGE_ORDER:
            self.machine.start(stage)
            try:
                result = self._stages[stage].run_stage(
                    plan.directive_for(stage), self.executor, inboxes[stage]
                )
            except Exception as exc:
                logger.error("Stage %s failed: %s", stage.value, exc)
                self.machine.fail(stage, str(exc))
                self.report = self._build_report(plan, results, error=str(exc))
                raise StageFailure(stage, exc) from exc

            results.append(result)
            self._route(plan, stage, result.emitted, inboxes)
            self.machine.succeed(stage)

        self.report = self._build_report(plan, results)
        logger.info(
            "Run %s complete (%s)",
            plan.plan_hash[:19],
            "changed" if self.report.changed else "no changes",
        )
        return self.report

    # ------------------------------------------------------------------
    # Signal routing
    # ------------------------------------------------------------------

    @staticmethod
    def _route(
        plan: ProvisioningPlan,
        source: Stage,
        emitted: list[Signal],
        inboxes: dict[Stage, list[Signal]],
    ) -> None:
        for signal in emitted:
            routes = plan.routes_from(source, signal)
            if not routes:
                logger.debug("%s emitted %s with no route", source.value, signal.value)
            for route in routes:
                if signal not in inboxes[route.target]:
                    inboxes[route.target].append(signal)

    def _build_report(
        self,
        plan: ProvisioningPlan,
        results: list[StageResult],
        *,
        error: str | None = None,
    ) -> RunReport:
        return RunReport(
            plan_hash=plan.plan_hash,
            state=self.machine.state,
            results=results,
            transitions=self.machine.transitions,
            failed_stage=self.machine.failed_stage,
            error=error,
        )

    @property
    def state(self) -> RunState:
        return self.machine.state
