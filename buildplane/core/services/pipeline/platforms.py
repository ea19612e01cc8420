"""
Platform catalog — the packaging targets buildplane knows about.

Profiles are named ``<os>-<version>-<arch>``.  A build file picks one by
name and may override tool paths, the signing table or the output
directory (see ``apply_overrides``).
"""

from __future__ import annotations

import logging

from buildplane.core.errors import ConfigError
from buildplane.core.models.build import PlatformOverrides
from buildplane.core.models.platform import PlatformProfile, SigningTarget

logger = logging.getLogger(__name__)


# ── Signing tables ──────────────────────────────────────────────
#
# Notarization requires every binary, .dylib and .bundle in the package
# to carry a hardened-runtime signature.  Each entry is one find/codesign
# sweep; ``{root}`` is the staged root inside the build directory.

OSX_SIGNING_TABLE: tuple[SigningTarget, ...] = (
    SigningTarget(path="{root}/usr/local/bin/", pattern="*"),
    SigningTarget(path="{root}/usr/local/sbin/", pattern="*"),
    SigningTarget(path="{root}/usr/local/libexec/", pattern="*"),
    SigningTarget(path="{root}/usr/local/lib/", pattern="*.dylib"),
    SigningTarget(path="{root}/usr/local/lib", pattern="*.bundle"),
    SigningTarget(path="plugins", pattern="*"),
)


_CATALOG: dict[str, dict[str, str]] = {
    "osx-12-x86_64": {"os_version": "12", "architecture": "x86_64"},
    "osx-13-x86_64": {"os_version": "13", "architecture": "x86_64"},
    "osx-13-arm64": {"os_version": "13", "architecture": "arm64"},
    "osx-14-x86_64": {"os_version": "14", "architecture": "x86_64"},
    "osx-14-arm64": {"os_version": "14", "architecture": "arm64"},
    "osx-15-x86_64": {"os_version": "15", "architecture": "x86_64"},
    "osx-15-arm64": {"os_version": "15", "architecture": "arm64"},
}


def list_platforms() -> list[str]:
    """Names of every catalog platform, sorted."""
    return sorted(_CATALOG)


def get_platform(name: str) -> PlatformProfile:
    """Build the profile for a catalog platform.

    Raises:
        ConfigError: If *name* is not in the catalog.
    """
    entry = _CATALOG.get(name)
    if entry is None:
        raise ConfigError(
            f"Unknown platform '{name}'. Known: {', '.join(list_platforms())}"
        )
    return PlatformProfile(
        name=name,
        os_name="osx",
        signing_table=OSX_SIGNING_TABLE,
        **entry,
    )


def apply_overrides(profile: PlatformProfile, overrides: PlatformOverrides) -> PlatformProfile:
    """Return a copy of *profile* with build-file overrides applied."""
    update: dict[str, object] = {}
    if overrides.tool_paths:
        update["tool_paths"] = {**profile.tool_paths, **overrides.tool_paths}
    if overrides.signing_table is not None:
        update["signing_table"] = tuple(overrides.signing_table)
    if overrides.output_dir_name:
        update["output_dir_name"] = overrides.output_dir_name
    if not update:
        return profile
    logger.debug("Overriding %s for platform %s", ", ".join(sorted(update)), profile.name)
    return profile.model_copy(update=update)
