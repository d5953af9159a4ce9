"""Artifact URL resolution with the upstream release-tagging boundary.

Releases from 1.0.0 onward are tagged ``v<version>``; earlier releases are
tagged with the bare version. Only the path segment carries the ``v``; the
archive file name never does.
"""

from __future__ import annotations

import semver

from promprov.core.arch_resolver import resolve_arch
from promprov.core.errors import InvalidVersionFormat
from promprov.models.artifacts import ResolvedArtifact
from promprov.models.spec import ProvisioningSpec

TAG_PREFIX_BOUNDARY = semver.Version(1, 0, 0)

# Base directory archives are extracted under.
EXTRACT_ROOT = "/opt"


def parse_version(version: str) -> semver.Version:
    """Parse a strict ``major.minor.patch`` version.

    Raises ``InvalidVersionFormat`` for anything semver rejects.
    """
    try:
        return semver.Version.parse(version)
    except (TypeError, ValueError) as exc:
        raise InvalidVersionFormat(
            f"Version {version!r} is not a valid semantic version "
            "(expected MAJOR.MINOR.PATCH)"
        ) from exc


def archive_stem(package_name: str, version: str, os_name: str, arch: str) -> str:
    """Return ``{pkg}-{version}.{os}-{arch}`` as used by upstream archives."""
    return f"{package_name}-{version}.{os_name}-{arch}"


def resolve_download_url(
    version: str,
    os_name: str,
    arch: str,
    url_base: str,
    package_name: str,
    extension: str,
    explicit_url: str | None = None,
) -> str:
    """Return the download URL for the daemon archive.

    An explicit URL is returned verbatim. ``url_base`` must already be
    well-formed; it is not normalized.
    """
    if explicit_url:
        return explicit_url

    parsed = parse_version(version)
    tag = f"v{version}" if parsed >= TAG_PREFIX_BOUNDARY else version
    filename = f"{archive_stem(package_name, version, os_name, arch)}.{extension}"
    return f"{url_base}/download/{tag}/{filename}"


def resolve_artifact(spec: ProvisioningSpec) -> ResolvedArtifact:
    """Resolve architecture, URL and on-host layout for *spec*."""
    arch = resolve_arch(spec.arch)
    url = resolve_download_url(
        spec.version,
        spec.os,
        arch,
        spec.download_url_base,
        spec.package_name,
        spec.download_extension,
        explicit_url=spec.download_url,
    )
    stem = archive_stem(spec.package_name, spec.version, spec.os, arch)
    extract_dir = f"{EXTRACT_ROOT}/{stem}"
    return ResolvedArtifact(
        arch=arch,
        url=url,
        archive_name=f"{stem}.{spec.download_extension}",
        extract_dir=extract_dir,
        binary_path=f"{extract_dir}/{spec.package_name}",
    )
