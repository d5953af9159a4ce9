"""promprov: declarative single-host provisioning for the Prometheus server.

Resolves the release artifact for the host, composes the daemon
configuration from layered defaults and overrides, fans out alert-rule
files, and runs Install -> Config -> RunService -> ServiceReload as a
strict chain where config changes reload and command-line changes restart.
"""

__version__ = "0.1.0"

from promprov.core.orchestrator import StageOrchestrator
from promprov.core.planner import build_plan
from promprov.cli.app import app as cli

__all__ = ["StageOrchestrator", "build_plan", "cli", "__version__"]
