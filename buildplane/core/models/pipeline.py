"""
Pipeline models — the packaging command sequence and its switches.

A pipeline is a transient value: built for one packaging run, handed
to the driver, executed there.  Nothing here runs a command.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from buildplane.core.config import settings


class PipelineConfig(BaseModel):
    """Process-wide switches that gate the signing stages.

    Built explicitly and passed to the builder, so the builder stays a
    pure function of its inputs.  Use ``from_env()`` at entry points.
    """

    model_config = ConfigDict(frozen=True)

    force_signing: bool = False
    skip_notarization: bool = False

    @classmethod
    def from_env(cls) -> PipelineConfig:
        """Read BUILDPLANE_FORCE_SIGNING / BUILDPLANE_NO_NOTARIZE."""
        return cls(
            force_signing=settings.env_flag("FORCE_SIGNING"),
            skip_notarization=settings.env_flag("NO_NOTARIZE"),
        )


class PipelineStage(BaseModel):
    """A named, ordered group of shell commands (possibly empty)."""

    name: str
    commands: list[str] = Field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.commands


class CommandPipeline(BaseModel):
    """Ordered stages for one platform packaging run."""

    platform: str
    project: str
    stages: list[PipelineStage] = Field(default_factory=list)

    @property
    def commands(self) -> list[str]:
        """All commands, in order, with skipped stages contributing nothing."""
        return [cmd for stage in self.stages for cmd in stage.commands]

    def stage(self, name: str) -> PipelineStage | None:
        """Look up a stage by name."""
        for s in self.stages:
            if s.name == name:
                return s
        return None

    @property
    def active_stages(self) -> list[str]:
        """Names of the stages that emitted at least one command."""
        return [s.name for s in self.stages if not s.empty]

    def to_dict(self) -> dict[str, Any]:
        return {
            "platform": self.platform,
            "project": self.project,
            "stages": {s.name: s.commands for s in self.stages if not s.empty},
            "commands": self.commands,
        }


class GeneratedFile(BaseModel):
    """A packaging input rendered from a template.

    Attributes:
        path:       Relative path inside the packaging work directory.
        content:    Full file content.
        executable: Whether to mark the file 0755 when written.
    """

    path: str
    content: str
    executable: bool = False
