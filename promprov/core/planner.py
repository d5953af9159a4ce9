"""Pre-flight resolution: turns a ProvisioningSpec into a ProvisioningPlan.

All resolution (architecture, URL, flags, merge, alert files) happens here,
before any stage runs. An error raised from ``build_plan`` therefore means
the host was never touched.

Notification wiring is decided here too, as plain data:

* configuration-file resources notify ``reload``; the reload route to
  ServiceReload always exists.
* binary and command-line resources notify ``restart`` only when
  ``restart_on_change`` is set, and only then does a restart route to
  RunService exist. Otherwise their changes are picked up whenever the
  service next restarts for some other reason.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from promprov.core.alert_files import generate_alert_files, render_main_alert_file
from promprov.core.config_composer import compose_config, render_config
from promprov.core.daemon_flags import (
    MODERN_FLAGS_BOUNDARY,
    build_daemon_flags,
    build_service_definition,
    reload_command,
    render_env_file,
)
from promprov.core.hasher import content_address
from promprov.core.url_resolver import parse_version, resolve_artifact
from promprov.models.artifacts import AlertFileArtifact, ResolvedArtifact
from promprov.models.plan import (
    ProvisioningPlan,
    ResourceDirective,
    ResourceKind,
    StageDirective,
)
from promprov.models.spec import InstallMethod, ProvisioningSpec
from promprov.models.stages import NotificationRoute, Signal, Stage

logger = logging.getLogger(__name__)


def build_plan(
    spec: ProvisioningSpec,
    defaults: Mapping[str, Any] | None = None,
) -> ProvisioningPlan:
    """Resolve everything *spec* needs and lay it out stage by stage."""
    parse_version(spec.version)
    artifact = resolve_artifact(spec)
    flags = build_daemon_flags(spec)

    main_alerts = render_main_alert_file(spec.alerts, spec.config_dir, spec.version)
    alert_files = generate_alert_files(spec.extra_alerts, spec.config_dir, spec.version)
    merged = compose_config(spec, alert_files, defaults=defaults)
    config_text = render_config(merged)

    restart = Signal.RESTART if spec.restart_on_change else None

    stages = [
        StageDirective(
            stage=Stage.INSTALL,
            resources=_install_resources(spec, artifact, restart),
            payload={
                "url": artifact.url,
                "install_method": spec.install_method.value,
                "purge_config_dir": spec.purge_config_dir,
            },
        ),
        StageDirective(
            stage=Stage.CONFIG,
            resources=_config_resources(
                spec, artifact, flags, main_alerts, alert_files, config_text, restart
            ),
            payload={
                "rule_files": merged.rule_files,
                "storage_retention": spec.storage_retention,
                "template": spec.config_template,
            },
        ),
        StageDirective(
            stage=Stage.RUN_SERVICE,
            resources=_service_resources(spec),
            payload={"manage_service": spec.manage_service},
        ),
        StageDirective(
            stage=Stage.SERVICE_RELOAD,
            resources=_reload_resources(spec),
            payload={"command": reload_command(spec.init_style, spec.service_name)},
        ),
    ]

    routes = [NotificationRoute(source=Stage.CONFIG, signal=Signal.RELOAD, target=Stage.SERVICE_RELOAD)]
    if spec.restart_on_change:
        routes.extend(
            NotificationRoute(source=source, signal=Signal.RESTART, target=Stage.RUN_SERVICE)
            for source in (Stage.INSTALL, Stage.CONFIG)
        )

    plan_hash = content_address({
        "spec": spec.model_dump(mode="json"),
        "stages": [s.model_dump(mode="json") for s in stages],
        "routes": [r.model_dump(mode="json") for r in routes],
    })
    logger.info(
        "Planned %s %s (%s), %d resources, plan %s",
        spec.package_name,
        spec.version,
        artifact.arch,
        sum(len(s.resources) for s in stages),
        plan_hash[:19],
    )

    return ProvisioningPlan(
        spec=spec,
        artifact=artifact,
        merged_config=merged,
        config_text=config_text,
        alert_files=[main_alerts, *alert_files],
        daemon_flags=flags,
        stages=stages,
        routes=routes,
        plan_hash=plan_hash,
    )


# ----------------------------------------------------------------------
# Per-stage resource layout
# ----------------------------------------------------------------------


def _install_resources(
    spec: ProvisioningSpec, artifact: ResolvedArtifact, restart: Signal | None
) -> list[ResourceDirective]:
    resources: list[ResourceDirective] = []

    if spec.manage_group:
        resources.append(
            ResourceDirective(kind=ResourceKind.GROUP, name=spec.group, attrs={"system": True})
        )
    if spec.manage_user:
        resources.append(
            ResourceDirective(
                kind=ResourceKind.USER,
                name=spec.user,
                group=spec.group,
                attrs={
                    "groups": list(spec.extra_groups),
                    "shell": "/bin/false",
                    "system": True,
                },
            )
        )

    if spec.install_method == InstallMethod.URL:
        resources.extend([
            ResourceDirective(
                kind=ResourceKind.ARCHIVE,
                name=f"/tmp/{artifact.archive_name}",
                attrs={
                    "source": artifact.url,
                    "extract_path": artifact.extract_dir.rsplit("/", 1)[0],
                    "creates": artifact.binary_path,
                    "cleanup": True,
                },
                notify=restart,
            ),
            ResourceDirective(
                kind=ResourceKind.SYMLINK,
                name=f"{spec.bin_dir}/{spec.package_name}",
                attrs={"target": artifact.binary_path},
                notify=restart,
            ),
            ResourceDirective(
                kind=ResourceKind.SYMLINK,
                name=f"{spec.bin_dir}/promtool",
                attrs={"target": f"{artifact.extract_dir}/promtool"},
            ),
            ResourceDirective(
                kind=ResourceKind.DIRECTORY,
                name=spec.shared_dir,
                owner="root",
                group="root",
                mode="0755",
            ),
            ResourceDirective(
                kind=ResourceKind.SYMLINK,
                name=f"{spec.shared_dir}/consoles",
                attrs={"target": f"{artifact.extract_dir}/consoles"},
            ),
            ResourceDirective(
                kind=ResourceKind.SYMLINK,
                name=f"{spec.shared_dir}/console_libraries",
                attrs={"target": f"{artifact.extract_dir}/console_libraries"},
            ),
        ])
    elif spec.install_method == InstallMethod.PACKAGE:
        resources.append(
            ResourceDirective(
                kind=ResourceKind.PACKAGE,
                name=spec.package_name,
                attrs={"ensure": spec.package_ensure},
                notify=restart,
            )
        )

    resources.extend([
        ResourceDirective(
            kind=ResourceKind.DIRECTORY,
            name=spec.localstorage,
            owner=spec.user,
            group=spec.group,
            mode="0755",
        ),
        ResourceDirective(
            kind=ResourceKind.DIRECTORY,
            name=spec.config_dir,
            owner="root",
            group=spec.group,
            mode="0750",
            attrs={"purge": spec.purge_config_dir, "recurse": spec.purge_config_dir},
        ),
    ])
    return resources


def _config_resources(
    spec: ProvisioningSpec,
    artifact: ResolvedArtifact,
    flags: list[str],
    main_alerts: AlertFileArtifact,
    alert_files: list[AlertFileArtifact],
    config_text: str,
    restart: Signal | None,
) -> list[ResourceDirective]:
    resources = [
        ResourceDirective(
            kind=ResourceKind.DIRECTORY,
            name=f"{spec.config_dir}/rules",
            owner="root",
            group=spec.group,
            mode="0750",
            attrs={"purge": spec.purge_config_dir, "recurse": spec.purge_config_dir},
        ),
    ]
    for alert_file in (main_alerts, *alert_files):
        resources.append(
            ResourceDirective(
                kind=ResourceKind.FILE,
                name=alert_file.path,
                content=alert_file.content,
                owner="root",
                group=spec.group,
                mode=spec.config_mode,
                notify=Signal.RELOAD,
            )
        )

    resources.append(
        ResourceDirective(
            kind=ResourceKind.FILE,
            name=spec.config_file,
            content=config_text,
            owner="root",
            group=spec.group,
            mode=spec.config_mode,
            attrs={
                "template": spec.config_template,
                "validate_cmd": _validate_cmd(spec),
            },
            notify=Signal.RELOAD,
        )
    )

    definition = build_service_definition(spec, artifact, flags)
    if definition is not None:
        resources.append(
            ResourceDirective(
                kind=ResourceKind.SERVICE_DEFINITION,
                name=definition.path,
                content=definition.content,
                owner="root",
                group="root",
                mode="0644",
                attrs=definition.attrs,
                notify=restart,
            )
        )
        if definition.env_file:
            resources.append(
                ResourceDirective(
                    kind=ResourceKind.FILE,
                    name=definition.env_file,
                    content=render_env_file(flags),
                    owner="root",
                    group="root",
                    mode="0644",
                    notify=restart,
                )
            )
    return resources


def _validate_cmd(spec: ProvisioningSpec) -> str:
    promtool = f"{spec.bin_dir}/promtool"
    if parse_version(spec.version) >= MODERN_FLAGS_BOUNDARY:
        return f"{promtool} check config %"
    return f"{promtool} check-config %"


def _service_resources(spec: ProvisioningSpec) -> list[ResourceDirective]:
    if not spec.manage_service:
        return []
    return [
        ResourceDirective(
            kind=ResourceKind.SERVICE,
            name=spec.service_name,
            attrs={
                "ensure": spec.service_ensure,
                "enable": spec.service_enable,
                "provider": spec.init_style.value,
            },
        )
    ]


def _reload_resources(spec: ProvisioningSpec) -> list[ResourceDirective]:
    if not spec.manage_service:
        return []
    return [
        ResourceDirective(
            kind=ResourceKind.EXEC,
            name=f"{spec.service_name}-reload",
            attrs={
                "command": reload_command(spec.init_style, spec.service_name),
                "refreshonly": True,
                "path": ["/usr/bin", "/bin", "/usr/sbin", "/sbin"],
            },
        )
    ]
