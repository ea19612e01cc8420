"""
Build model — the contents of build.yml.

Declares the project being packaged, the target platform and the
components whose sources must be resolved first.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from buildplane.core.models.platform import SigningTarget
from buildplane.core.models.project import ProjectMetadata


class ComponentSource(BaseModel):
    """A component whose source lives in a git repository.

    ``version`` is the fallback used when the repository carries no
    tag that ``git describe`` can use.
    """

    name: str
    url: str
    ref: str = "HEAD"
    dirname: str | None = None
    clone_options: dict[str, Any] = Field(default_factory=dict)
    version: str | None = None


class PlatformOverrides(BaseModel):
    """Per-build adjustments applied on top of a catalog platform."""

    tool_paths: dict[str, str] = Field(default_factory=dict)
    signing_table: list[SigningTarget] | None = None
    output_dir_name: str | None = None


class BuildConfig(BaseModel):
    """Root of build.yml."""

    version: int = 1

    project: ProjectMetadata
    platform: str
    overrides: PlatformOverrides = Field(default_factory=PlatformOverrides)
    components: list[ComponentSource] = Field(default_factory=list)

    def get_component(self, name: str) -> ComponentSource | None:
        """Look up a component by name."""
        for comp in self.components:
            if comp.name == name:
                return comp
        return None
