"""
macOS packaging inputs — distribution descriptor, install scripts, uninstaller.

These are the static files the pipeline's stage_inputs step copies into
the build tree.  Rendering is plain ``str.format`` over the project
metadata; writing them out is a separate step so callers can inspect
or diff the content first.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from buildplane.core.models.pipeline import GeneratedFile
from buildplane.core.models.platform import PlatformProfile
from buildplane.core.models.project import ProjectMetadata
from buildplane.core.services import naming

logger = logging.getLogger(__name__)


_DISTRIBUTION_XML = """\
<?xml version="1.0" encoding="utf-8" standalone="no"?>
<installer-gui-script minSpecVersion="2">
    <title>{name} {version}</title>
    <organization>{identifier}</organization>
    <options customize="never" require-scripts="false" hostArchitectures="{host_arch}"/>
    <domains enable_anywhere="false" enable_currentUserHome="false" enable_localSystem="true"/>
    <choices-outline>
        <line choice="default">
            <line choice="{identifier}.{name}"/>
        </line>
    </choices-outline>
    <choice id="default"/>
    <choice id="{identifier}.{name}" visible="false">
        <pkg-ref id="{identifier}.{name}"/>
    </choice>
    <pkg-ref id="{identifier}.{name}" version="{version}" onConclusion="none">{payload}</pkg-ref>
</installer-gui-script>
"""

_PREINSTALL = """\
#!/bin/bash
# Preinstall for {name} {version}-{release}
set -e

if [ -f "/var/db/receipts/{identifier}.{name}.bom" ]; then
    echo "Upgrading existing {name} installation"
fi
exit 0
"""

_POSTINSTALL = """\
#!/bin/bash
# Postinstall for {name} {version}-{release}
set -e

if [ -d "/usr/local/share/doc/{name}" ]; then
    chmod -R go-w "/usr/local/share/doc/{name}"
fi
exit 0
"""

_UNINSTALLER = """\
#!/bin/bash
# Uninstaller for {name}
set -e

if [ "$(id -u)" -ne 0 ]; then
    echo "{name}-uninstaller must be run as root" >&2
    exit 1
fi

echo "Removing files installed by {identifier}.{name}"
pkgutil --only-files --files {identifier}.{name} | while read -r f; do
    rm -f "/$f"
done
pkgutil --only-dirs --files {identifier}.{name} | sort -r | while read -r d; do
    rmdir "/$d" 2>/dev/null || true
done
pkgutil --forget {identifier}.{name}
echo "{name} has been uninstalled"
"""


def _context(project: ProjectMetadata, profile: PlatformProfile) -> dict[str, str]:
    return {
        "name": project.name,
        "version": project.version,
        "release": project.release,
        "identifier": project.identifier,
        "payload": naming.payload_file_name(project),
        "host_arch": profile.architecture or "x86_64,arm64",
    }


def generate_packaging_artifacts(
    project: ProjectMetadata, profile: PlatformProfile
) -> list[GeneratedFile]:
    """Render every packaging input for *project*."""
    naming.check_metadata(project, naming.PACKAGE_FIELDS)
    ctx = _context(project, profile)
    return [
        GeneratedFile(
            path=f"{project.name}-installer.xml",
            content=_DISTRIBUTION_XML.format(**ctx),
        ),
        GeneratedFile(
            path="scripts/preinstall",
            content=_PREINSTALL.format(**ctx),
            executable=True,
        ),
        GeneratedFile(
            path="scripts/postinstall",
            content=_POSTINSTALL.format(**ctx),
            executable=True,
        ),
        GeneratedFile(
            path=f"{project.name}-uninstaller.tool",
            content=_UNINSTALLER.format(**ctx),
            executable=True,
        ),
    ]


def write_generated_files(
    workdir: Path,
    files: list[GeneratedFile],
    resources_source: Path | None = None,
) -> list[Path]:
    """Write *files* under *workdir*, returning the paths written.

    If *resources_source* (default: ``./resources/osx``) exists, its
    contents are copied to ``workdir/resources/osx`` as well.
    """
    written: list[Path] = []

    for f in files:
        target = workdir / f.path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(f.content, encoding="utf-8")
        if f.executable:
            target.chmod(0o755)
        written.append(target)
        logger.debug("Wrote %s", target)

    source = resources_source if resources_source is not None else Path("resources/osx")
    resources_dir = workdir / "resources" / "osx"
    resources_dir.mkdir(parents=True, exist_ok=True)
    if source.is_dir() and source.resolve() != resources_dir.resolve():
        shutil.copytree(source, resources_dir, dirs_exist_ok=True)
        logger.debug("Copied extra resources from %s", source)

    return written
