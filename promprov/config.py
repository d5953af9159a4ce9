"""Tool configuration: env-driven via pydantic-settings.

Reads from a .env file and PROMPROV_* environment variables. These settings
govern the tool itself, not the daemon being provisioned.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ProvisionerSettings(BaseSettings):
    """Settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export PROMPROV_LOG_LEVEL=DEBUG
        export PROMPROV_STATE_PATH=/var/lib/promprov/state.json
        export PROMPROV_DEFAULTS_PATH=/etc/promprov/defaults.yaml
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PROMPROV_",
        env_file_encoding="utf-8",
    )

    log_level: str = "INFO"

    # Recording executor state (the simulated host)
    state_path: Path = Path(".promprov/state.json")

    # Optional site-wide layer for the daemon's global settings
    defaults_path: Path | None = None

    # Fill os/arch/init_style from the local host when not declared
    gather_facts: bool = True
