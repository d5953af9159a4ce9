"""Provisioning input model: one immutable snapshot per run."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class InstallMethod(str, Enum):
    """How the daemon binary reaches the host."""

    URL = "url"
    PACKAGE = "package"
    NONE = "none"


class InitStyle(str, Enum):
    """Service-manager style reported by the host facts."""

    SYSTEMD = "systemd"
    UPSTART = "upstart"
    SYSV = "sysv"
    SLES = "sles"
    DEBIAN = "debian"
    LAUNCHD = "launchd"
    NONE = "none"


def _default_scrape_configs() -> list[dict[str, Any]]:
    return [
        {
            "job_name": "prometheus",
            "scrape_interval": "10s",
            "scrape_timeout": "10s",
            "static_configs": [
                {"targets": ["localhost:9090"], "labels": {"alias": "Prometheus"}}
            ],
        }
    ]


class ProvisioningSpec(BaseModel):
    """Fully-resolved inputs for one provisioning run.

    ``version``, ``os``, ``arch`` and ``init_style`` have no defaults; use
    :func:`promprov.core.parameters.load_spec` to fill them from host facts
    and fail fast when they are absent.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Identity
    user: str = "prometheus"
    group: str = "prometheus"
    extra_groups: list[str] = []
    manage_user: bool = True
    manage_group: bool = True

    # Filesystem locations
    bin_dir: str = "/usr/local/bin"
    shared_dir: str = "/usr/local/share/prometheus"
    config_dir: str = "/etc/prometheus"
    localstorage: str = "/var/lib/prometheus"
    env_file_path: str = "/etc/default"

    # Artifact identity
    version: str
    os: str
    arch: str
    install_method: InstallMethod = InstallMethod.URL
    package_name: str = "prometheus"
    package_ensure: str = "latest"

    # Network source
    download_url: str | None = None
    download_url_base: str = "https://github.com/prometheus/prometheus/releases"
    download_extension: str = "tar.gz"

    # Runtime behaviour
    service_enable: bool = True
    service_ensure: str = "running"
    manage_service: bool = True
    restart_on_change: bool = True
    init_style: InitStyle
    purge_config_dir: bool = True

    # Configuration payload
    config_template: str = "prometheus.yaml"
    config_mode: str = "0660"
    global_config: dict[str, Any] = {}
    rule_files: list[str] = []
    scrape_configs: list[dict[str, Any]] = Field(default_factory=_default_scrape_configs)
    remote_read_configs: list[dict[str, Any]] = []
    remote_write_configs: list[dict[str, Any]] = []
    alerts: list[dict[str, Any]] = []
    extra_alerts: dict[str, list[dict[str, Any]]] = {}
    alert_relabel_config: list[dict[str, Any]] = []
    alertmanagers_config: list[dict[str, Any]] = []
    storage_retention: str = "360h"
    extra_options: str = ""

    @property
    def service_name(self) -> str:
        """Name of the supervised service (matches the package name)."""
        return self.package_name

    @property
    def config_file(self) -> str:
        """Absolute path of the rendered daemon configuration."""
        return f"{self.config_dir}/{self.package_name}.yaml"
