"""
Artifact naming — file and directory names derived from project metadata.

Pure functions.  Malformed metadata is a caller bug and raises
``MalformedMetadata``; there is nothing to recover from.
"""

from __future__ import annotations

import re

from buildplane.core.errors import MalformedMetadata
from buildplane.core.models.platform import PlatformProfile
from buildplane.core.models.project import ProjectMetadata

# Values interpolated into shell commands and file names
_SAFE_TOKEN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._+~-]*$")

# Artifact names only need the first three; pkgbuild also needs the identifier
NAME_FIELDS = ("name", "version", "release")
PACKAGE_FIELDS = NAME_FIELDS + ("identifier",)


def check_metadata(project: ProjectMetadata, fields: tuple[str, ...] = NAME_FIELDS) -> None:
    """Raise ``MalformedMetadata`` unless *fields* of *project* are usable."""
    for field in fields:
        value = getattr(project, field)
        if not value:
            raise MalformedMetadata(f"Project metadata is missing '{field}'")
        if not _SAFE_TOKEN.match(value):
            raise MalformedMetadata(
                f"Project metadata field '{field}' has an unusable value: {value!r}"
            )


def package_file_name(project: ProjectMetadata, profile: PlatformProfile) -> str:
    """Name of the final disk image, e.g. ``acme-1.2.3-1.osx15.dmg``."""
    check_metadata(project)
    return f"{project.name}-{project.version}-{project.release}.{profile.os_identity}.dmg"


def payload_file_name(project: ProjectMetadata) -> str:
    """Name of the component package built by pkgbuild."""
    check_metadata(project)
    return f"{project.name}-{project.version}-{project.release}.pkg"


def installer_file_name(project: ProjectMetadata) -> str:
    """Name of the product installer built by productbuild."""
    check_metadata(project)
    return f"{project.name}-{project.version}-{project.release}-installer.pkg"


def staged_root_name(project: ProjectMetadata) -> str:
    """Directory under ``root/`` the project tarball is unpacked into."""
    check_metadata(project)
    return project.staged_name


def target_directory(profile: PlatformProfile, repo: str | None = None) -> str:
    """Platform-specific subdirectory, e.g. ``osx/15/arm64``.

    ``repo`` nests the artifact one level deeper (``osx/15/arm64/<repo>``).
    """
    parts = [p for p in (profile.os_name, profile.os_version, profile.architecture) if p]
    if repo is not None:
        repo = repo.strip("/")
        if not repo or ".." in repo.split("/"):
            raise MalformedMetadata(f"Unusable output repo override: {repo!r}")
        parts.append(repo)
    return "/".join(parts)


def output_directory(profile: PlatformProfile, repo: str | None = None) -> str:
    """Directory, relative to the build root, finished artifacts go to."""
    target = target_directory(profile, repo)
    if not target:
        return profile.output_dir_name
    return f"{profile.output_dir_name}/{target}"
