"""
Platform packaging pipelines.

    from buildplane.core.services.pipeline import build_packaging_pipeline

    pipeline = build_packaging_pipeline(profile, project, PipelineConfig())
    for command in pipeline.commands:
        ...
"""

from __future__ import annotations

from pathlib import Path

from buildplane.core.errors import ConfigError
from buildplane.core.models.pipeline import CommandPipeline, PipelineConfig
from buildplane.core.models.platform import PlatformProfile
from buildplane.core.models.project import ProjectMetadata
from buildplane.core.services.pipeline.osx import build_osx_pipeline
from buildplane.core.services.pipeline.platforms import apply_overrides, get_platform, list_platforms

_BUILDERS = {
    "osx": build_osx_pipeline,
}


def build_packaging_pipeline(
    profile: PlatformProfile,
    project: ProjectMetadata,
    config: PipelineConfig | None = None,
    *,
    resources_root: Path | None = None,
) -> CommandPipeline:
    """Ordered packaging commands for *project* on *profile*.

    Raises:
        ConfigError: If no builder exists for the profile's OS.
        MalformedMetadata: If required project metadata is unusable.
    """
    builder = _BUILDERS.get(profile.os_name)
    if builder is None:
        raise ConfigError(f"No packaging pipeline for OS '{profile.os_name}'")
    return builder(profile, project, config or PipelineConfig(), resources_root=resources_root)


__all__ = [
    "apply_overrides",
    "build_packaging_pipeline",
    "get_platform",
    "list_platforms",
]
