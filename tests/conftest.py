"""Shared test fixtures for promprov."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from promprov.core.executor import RecordingExecutor
from promprov.core.orchestrator import StageOrchestrator
from promprov.core.planner import build_plan
from promprov.models.plan import ProvisioningPlan
from promprov.models.spec import ProvisioningSpec


@pytest.fixture
def facts() -> dict[str, str]:
    """Host facts for a systemd amd64 Linux box."""
    return {
        "kernel": "Linux",
        "architecture": "x86_64",
        "service_provider": "systemd",
    }


@pytest.fixture
def base_params() -> dict[str, Any]:
    """Minimal declared parameters (facts supply os/arch/init_style)."""
    return {"version": "2.3.1"}


@pytest.fixture
def make_spec() -> Callable[..., ProvisioningSpec]:
    """Factory fixture: build a ProvisioningSpec with sensible defaults."""

    def _factory(**overrides: Any) -> ProvisioningSpec:
        values: dict[str, Any] = {
            "version": "2.3.1",
            "os": "linux",
            "arch": "x86_64",
            "init_style": "systemd",
        }
        values.update(overrides)
        return ProvisioningSpec(**values)

    return _factory


@pytest.fixture
def spec(make_spec: Callable[..., ProvisioningSpec]) -> ProvisioningSpec:
    return make_spec()


@pytest.fixture
def plan(spec: ProvisioningSpec) -> ProvisioningPlan:
    return build_plan(spec)


@pytest.fixture
def executor() -> RecordingExecutor:
    """Provide a fresh in-memory executor (an empty host)."""
    return RecordingExecutor()


@pytest.fixture
def orchestrator(executor: RecordingExecutor) -> StageOrchestrator:
    return StageOrchestrator(executor)


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    """Provide a path for a file-backed executor state."""
    return tmp_path / "state.json"
