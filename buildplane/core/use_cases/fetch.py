"""
Fetch use case — resolve every component source declared in build.yml.

Each component is validated, cloned or updated, checked out and
versioned.  A failure stops that component only; the report records it
and the remaining components are still resolved.  Nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from buildplane.adapters.vcs.git import GitSource
from buildplane.core.errors import BuildplaneError
from buildplane.core.models.build import BuildConfig, ComponentSource

logger = logging.getLogger(__name__)


@dataclass
class ComponentResult:
    """Outcome of resolving one component."""

    name: str
    dirname: str = ""
    ref: str = ""
    version: str | None = None
    version_source: str | None = None   # "git" | "configured" | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict = {"name": self.name, "ok": self.ok}
        if self.error:
            result["error"] = self.error
            return result
        result["dirname"] = self.dirname
        result["ref"] = self.ref
        result["version"] = self.version
        result["version_source"] = self.version_source
        return result


@dataclass
class FetchReport:
    """Result of resolving all components."""

    workdir: Path | None = None
    components: list[ComponentResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(c.ok for c in self.components)

    @property
    def failed(self) -> list[ComponentResult]:
        return [c for c in self.components if not c.ok]

    def get(self, name: str) -> ComponentResult | None:
        for c in self.components:
            if c.name == name:
                return c
        return None

    def to_dict(self) -> dict:
        return {
            "workdir": str(self.workdir) if self.workdir else None,
            "ok": self.ok,
            "components": [c.to_dict() for c in self.components],
        }


def fetch_component(
    component: ComponentSource,
    workdir: Path,
    probe_timeout: float | None = None,
) -> ComponentResult:
    """Resolve one component.  Never raises for source-control failures."""
    result = ComponentResult(name=component.name, ref=component.ref)
    try:
        source = GitSource(
            component.url,
            workdir,
            ref=component.ref,
            dirname=component.dirname,
            clone_options=component.clone_options,
            probe_timeout=probe_timeout,
        )
        result.dirname = source.dirname
        version = source.fetch()
    except BuildplaneError as e:
        logger.error("Component %s: %s", component.name, e)
        result.error = str(e)
        return result

    if version:
        result.version, result.version_source = version, "git"
    elif component.version:
        logger.info(
            "Using configured version %s for untagged component %s",
            component.version,
            component.name,
        )
        result.version, result.version_source = component.version, "configured"
    return result


def fetch_sources(
    config: BuildConfig,
    workdir: Path,
    components: list[str] | None = None,
    probe_timeout: float | None = None,
) -> FetchReport:
    """Resolve the components of *config* into *workdir*.

    Args:
        config: Loaded build configuration.
        workdir: Directory sources are cloned into (created if missing).
        components: Optional component names to restrict to. None = all.
        probe_timeout: Remote validation bound in seconds (None = default).
    """
    workdir.mkdir(parents=True, exist_ok=True)
    report = FetchReport(workdir=workdir.resolve())

    targets = config.components
    if components:
        targets = [c for c in targets if c.name in components]

    for component in targets:
        report.components.append(fetch_component(component, report.workdir, probe_timeout))

    logger.info(
        "Resolved %d/%d components",
        len(report.components) - len(report.failed),
        len(report.components),
    )
    return report
