"""Architecture fact normalization (pure).

Upstream release archives are tagged Go-style; the host reports uname-style
or Debian-style names. Only the aliases below have published archives.
"""

from __future__ import annotations

from promprov.core.errors import UnsupportedArchitecture

ARCH_MAP: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
}


def resolve_arch(raw_arch: str) -> str:
    """Map a raw architecture fact to the artifact architecture tag."""
    try:
        return ARCH_MAP[raw_arch]
    except KeyError:
        raise UnsupportedArchitecture(
            f"Unsupported architecture {raw_arch!r}. "
            f"Supported: {sorted(ARCH_MAP)}"
        ) from None
