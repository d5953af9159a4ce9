"""Derived artifact models: computed once per run, never mutated."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ResolvedArtifact(BaseModel):
    """The downloadable daemon package resolved for this host."""

    model_config = ConfigDict(frozen=True)

    arch: str
    url: str
    archive_name: str
    extract_dir: str
    binary_path: str


class AlertFileArtifact(BaseModel):
    """One materialized alert-rule file.

    The content_address is the SHA-256 of ``content`` and doubles as the
    change fingerprint seen by the executor.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    content: str
    content_address: str  # "sha256:<hex>"
