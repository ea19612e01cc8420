"""
Domain models — Pydantic types for buildplane.

All models are re-exported here for convenient access:

    from buildplane.core.models import PlatformProfile, ProjectMetadata, CommandPipeline
"""

from buildplane.core.models.build import BuildConfig, ComponentSource, PlatformOverrides
from buildplane.core.models.pipeline import (
    CommandPipeline,
    GeneratedFile,
    PipelineConfig,
    PipelineStage,
)
from buildplane.core.models.platform import PlatformProfile, SigningTarget
from buildplane.core.models.project import ProjectMetadata

__all__ = [
    # build.py
    "BuildConfig",
    # pipeline.py
    "CommandPipeline",
    "ComponentSource",
    "GeneratedFile",
    "PipelineConfig",
    "PipelineStage",
    "PlatformOverrides",
    # platform.py
    "PlatformProfile",
    # project.py
    "ProjectMetadata",
    "SigningTarget",
]
