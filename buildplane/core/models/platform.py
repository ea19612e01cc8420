"""
Platform model — the packaging toolchain of one target OS.

A profile is immutable once built.  One instance exists per supported
target, selected by name from the catalog in
``buildplane.core.services.pipeline.platforms``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SigningTarget(BaseModel):
    """Where signable binaries live inside the packaging tree.

    ``path`` is relative to the packaging build directory and may use
    ``{root}`` for the staged root (``root/<name>-<version>``).
    ``pattern`` is a ``find -name`` glob.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    pattern: str = "*"


DEFAULT_TOOL_PATHS: dict[str, str] = {
    "make": "/usr/bin/make",
    "tar": "tar",
    "shasum": "/usr/bin/shasum",
    "pkgbuild": "/usr/bin/pkgbuild",
    "productbuild": "/usr/bin/productbuild",
    "productsign": "productsign",
    "hdiutil": "/usr/bin/hdiutil",
    "patch": "/usr/bin/patch",
    "codesign": "codesign",
    "xcrun": "xcrun",
    "spctl": "spctl",
    "brew": "/usr/local/bin/brew",
}


class PlatformProfile(BaseModel):
    """A target platform and the executables used to package for it."""

    model_config = ConfigDict(frozen=True)

    name: str                              # e.g. osx-15-arm64
    os_name: str = "osx"
    os_version: str = ""
    architecture: str = ""
    tool_paths: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_TOOL_PATHS))
    mktemp: str = "mktemp -d -t 'tmp'"
    num_cores: str = "/usr/sbin/sysctl -n hw.physicalcpu"
    signing_table: tuple[SigningTarget, ...] = ()
    output_dir_name: str = "output"

    @property
    def os_identity(self) -> str:
        """OS name and version as used in artifact names (``osx15``)."""
        return f"{self.os_name}{self.os_version}"

    def tool(self, name: str) -> str:
        """Executable for a logical tool, falling back to the bare name."""
        return self.tool_paths.get(name) or DEFAULT_TOOL_PATHS.get(name, name)
