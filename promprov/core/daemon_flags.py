"""Daemon command line and service definition.

Everything here ends up on the daemon's command line or in its service
definition, so a change can only take effect through a process restart.
A config-file reload never picks it up.
"""

from __future__ import annotations

import shlex
from typing import Any

import semver
from pydantic import BaseModel, ConfigDict

from promprov.core.url_resolver import parse_version
from promprov.models.artifacts import ResolvedArtifact
from promprov.models.spec import InitStyle, ProvisioningSpec

# 2.0.0 switched to double-dash flags and the TSDB storage engine.
MODERN_FLAGS_BOUNDARY = semver.Version(2, 0, 0)

_SERVICE_DEFINITION_PATHS: dict[InitStyle, str] = {
    InitStyle.SYSTEMD: "/etc/systemd/system/{name}.service",
    InitStyle.UPSTART: "/etc/init/{name}.conf",
    InitStyle.SYSV: "/etc/init.d/{name}",
    InitStyle.SLES: "/etc/init.d/{name}",
    InitStyle.DEBIAN: "/etc/init.d/{name}",
    InitStyle.LAUNCHD: "/Library/LaunchDaemons/io.{name}.daemon.plist",
}

# Init styles whose scripts read start-up flags from an environment file.
ENV_FILE_STYLES: frozenset[InitStyle] = frozenset(
    {InitStyle.UPSTART, InitStyle.SYSV, InitStyle.SLES, InitStyle.DEBIAN}
)


def build_daemon_flags(spec: ProvisioningSpec) -> list[str]:
    """Return the daemon's start-up flags for *spec*.

    ``extra_options`` is split with shell rules and appended verbatim.
    """
    if parse_version(spec.version) >= MODERN_FLAGS_BOUNDARY:
        flags = [
            f"--config.file={spec.config_file}",
            f"--storage.tsdb.path={spec.localstorage}",
            f"--storage.tsdb.retention={spec.storage_retention}",
            f"--web.console.templates={spec.shared_dir}/consoles",
            f"--web.console.libraries={spec.shared_dir}/console_libraries",
        ]
    else:
        flags = [
            f"-config.file={spec.config_file}",
            f"-storage.local.path={spec.localstorage}",
            f"-storage.local.retention={spec.storage_retention}",
            f"-web.console.templates={spec.shared_dir}/consoles",
            f"-web.console.libraries={spec.shared_dir}/console_libraries",
        ]
    flags.extend(shlex.split(spec.extra_options))
    return flags


def service_definition_path(init_style: InitStyle, service_name: str) -> str | None:
    """Return where *init_style* expects the service definition, if anywhere."""
    template = _SERVICE_DEFINITION_PATHS.get(init_style)
    return template.format(name=service_name) if template else None


def env_file_path(spec: ProvisioningSpec) -> str:
    return f"{spec.env_file_path}/{spec.service_name}"


def reload_command(init_style: InitStyle, service_name: str) -> str:
    """Return the shell command that makes the daemon re-read its config."""
    if init_style == InitStyle.SYSTEMD:
        return f"systemctl reload-or-restart {service_name}"
    if init_style in (InitStyle.UPSTART, InitStyle.NONE):
        return f"service {service_name} reload"
    if init_style == InitStyle.LAUNCHD:
        return f"launchctl stop {service_name} && launchctl start {service_name}"
    return f"/etc/init.d/{service_name} reload"


def exec_start(spec: ProvisioningSpec, flags: list[str]) -> str:
    binary = f"{spec.bin_dir}/{spec.package_name}"
    return shlex.join([binary, *flags])


def render_systemd_unit(spec: ProvisioningSpec, flags: list[str]) -> str:
    """Render the systemd unit for the daemon."""
    lines = [
        "[Unit]",
        "Description=Prometheus Monitoring framework",
        "Wants=basic.target",
        "After=basic.target network.target",
        "",
        "[Service]",
        f"User={spec.user}",
        f"Group={spec.group}",
        f"ExecStart={exec_start(spec, flags)}",
        "ExecReload=/bin/kill -HUP $MAINPID",
        "KillMode=process",
        "Restart=always",
        "",
        "[Install]",
        "WantedBy=multi-user.target",
    ]
    return "\n".join(lines) + "\n"


def render_env_file(flags: list[str]) -> str:
    return f"PROMETHEUS_OPTS={shlex.quote(shlex.join(flags))}\n"


class ServiceDefinition(BaseModel):
    """Where and how the service manager learns to start the daemon."""

    model_config = ConfigDict(frozen=True)

    path: str
    content: str | None = None
    env_file: str | None = None
    attrs: dict[str, Any] = {}


def build_service_definition(
    spec: ProvisioningSpec, artifact: ResolvedArtifact, flags: list[str]
) -> ServiceDefinition | None:
    """Describe the service definition for *spec*'s init style.

    Returns ``None`` for ``init_style=none``. Only systemd gets rendered
    content; other styles carry attributes for the executor's own templates.
    """
    path = service_definition_path(spec.init_style, spec.service_name)
    if path is None:
        return None
    env_file = env_file_path(spec) if spec.init_style in ENV_FILE_STYLES else None
    return ServiceDefinition(
        path=path,
        content=(
            render_systemd_unit(spec, flags)
            if spec.init_style == InitStyle.SYSTEMD
            else None
        ),
        env_file=env_file,
        attrs={
            "init_style": spec.init_style.value,
            "exec_start": exec_start(spec, flags),
            "binary": artifact.binary_path,
            "user": spec.user,
            "group": spec.group,
            "env_file": env_file,
        },
    )
