"""Canonical hashing helpers for change detection and plan identity."""

from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes.

    - sorted keys
    - no whitespace separators (",", ":")
    - ensure_ascii=True
    - UTF-8 encoding
    """
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def content_address(obj: Any) -> str:
    """Content-address a JSON-serializable object or a text payload.

    Returns "sha256:<hex>". Strings are hashed as their UTF-8 bytes so a
    file's address matches ``sha256sum`` of the file on disk.
    """
    if isinstance(obj, str):
        return f"sha256:{sha256_hex(obj.encode('utf-8'))}"
    return f"sha256:{sha256_hex(canonical_json_bytes(obj))}"


def resource_fingerprint(resource: dict[str, Any]) -> str:
    """SHA-256 of a resource's desired state, ignoring its notify wiring.

    Rewiring a notification is not a change to the host.
    """
    d = {k: v for k, v in resource.items() if k != "notify"}
    return sha256_hex(canonical_json_bytes(d))
