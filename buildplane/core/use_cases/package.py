"""
Package use case — turn build.yml into the packaging command sequence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from buildplane.core.config.loader import resolve_platform
from buildplane.core.errors import BuildplaneError
from buildplane.core.models.build import BuildConfig
from buildplane.core.models.pipeline import CommandPipeline, GeneratedFile, PipelineConfig
from buildplane.core.services import naming
from buildplane.core.services.generators.osx_packaging import (
    generate_packaging_artifacts,
    write_generated_files,
)
from buildplane.core.services.pipeline import build_packaging_pipeline

logger = logging.getLogger(__name__)


@dataclass
class PackagePlan:
    """The pipeline plus the names a driver reports on."""

    pipeline: CommandPipeline | None = None
    package_file: str = ""
    output_dir: str = ""
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        assert self.pipeline is not None
        return {
            "package_file": self.package_file,
            "output_dir": self.output_dir,
            **self.pipeline.to_dict(),
        }


def plan_package(
    config: BuildConfig,
    pipeline_config: PipelineConfig | None = None,
    resources_root: Path | None = None,
    version: str | None = None,
) -> PackagePlan:
    """Build the packaging pipeline for *config*.

    Args:
        config: Loaded build configuration.
        pipeline_config: Signing switches (default: read from environment).
        resources_root: Directory holding ``resources/`` (default: cwd).
        version: Resolved source version overriding the configured one.
    """
    plan = PackagePlan()
    project = config.project
    if version and version != project.version:
        logger.info("Packaging %s at resolved version %s", project.name, version)
        project = project.model_copy(update={"version": version})

    try:
        profile = resolve_platform(config)
        plan.pipeline = build_packaging_pipeline(
            profile,
            project,
            pipeline_config or PipelineConfig.from_env(),
            resources_root=resources_root,
        )
        plan.package_file = naming.package_file_name(project, profile)
        plan.output_dir = naming.output_directory(profile, project.repo)
    except BuildplaneError as e:
        plan.error = str(e)
    return plan


def write_packaging_artifacts(config: BuildConfig, workdir: Path) -> list[Path]:
    """Render and write the installer descriptor, scripts and uninstaller."""
    profile = resolve_platform(config)
    files: list[GeneratedFile] = generate_packaging_artifacts(config.project, profile)
    workdir.mkdir(parents=True, exist_ok=True)
    return write_generated_files(workdir, files)
