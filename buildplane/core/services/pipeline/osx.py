"""
macOS packaging pipeline — tarball → pkg → product installer → dmg.

Each stage is a small pure function returning its commands; a stage
whose condition does not hold returns ``[]``.  ``build_osx_pipeline``
composes them in a fixed order.  Later stages use paths created by
earlier ones, so the order is part of the contract:

    scaffold → stage_inputs → unpack → bill_of_materials_shim
    → extra_file_signing → binary_signing → package → build_installer
    → sign_installer → archive → sign_archive → notarize → publish

Signing requires these variables on the build host:

    SIGNING_KEYCHAIN            keychain holding the signing identities
    SIGNING_KEYCHAIN_PW         password unlocking that keychain
    APPLICATION_SIGNING_CERT    identity for binaries and the dmg
    INSTALLER_SIGNING_CERT      identity for the installer .pkg
    NOTARY_PROFILE              notarytool profile stored in the keychain

Commands are Makefile recipe lines: ``$(tempdir)`` is a make variable,
``$$VAR`` reaches the shell as ``$VAR``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial
from pathlib import Path

from buildplane.adapters.signing.extra_files import sign_extra_files
from buildplane.core.models.pipeline import CommandPipeline, PipelineConfig, PipelineStage
from buildplane.core.models.platform import PlatformProfile
from buildplane.core.models.project import ProjectMetadata
from buildplane.core.services import naming

logger = logging.getLogger(__name__)

Stage = Callable[[PlatformProfile, ProjectMetadata, PipelineConfig], list[str]]

SCAFFOLD_DIRS = ("dmg", "pkg", "scripts", "resources", "root", "payload", "plugins")
PRODUCTBUILD_RESOURCES = "resources/osx/productbuild"

UNLOCK_KEYCHAIN = "security unlock-keychain -p $$SIGNING_KEYCHAIN_PW $$SIGNING_KEYCHAIN"


def build_dir(profile: PlatformProfile) -> str:
    return f"$(tempdir)/{profile.os_name}/build"


def staged_root(profile: PlatformProfile, project: ProjectMetadata) -> str:
    return f"{build_dir(profile)}/root/{naming.staged_root_name(project)}"


def _dmg(profile: PlatformProfile, project: ProjectMetadata) -> str:
    return f"{build_dir(profile)}/dmg/{naming.package_file_name(project, profile)}"


# ── Stages ──────────────────────────────────────────────────────


def scaffold(profile: PlatformProfile, project: ProjectMetadata, config: PipelineConfig) -> list[str]:
    """Create every directory the later stages populate."""
    build = build_dir(profile)
    return [
        f"bash -c 'mkdir -p {build}/{{{','.join(SCAFFOLD_DIRS)}}}'",
        f"mkdir -p {staged_root(profile, project)}",
        f"mkdir -p {build}/pkg",
    ]


def stage_inputs(
    profile: PlatformProfile,
    project: ProjectMetadata,
    config: PipelineConfig,
    *,
    resources_root: Path | None = None,
) -> list[str]:
    """Copy the distribution descriptor, uninstaller, scripts and resources.

    The productbuild resource tree is optional; its presence is checked
    now, against *resources_root* (default: the current directory).
    """
    build = build_dir(profile)
    commands = [
        f"cp {project.name}-installer.xml {build}/",
        # The uninstaller ships next to the installer in the dmg
        f"cp {project.name}-uninstaller.tool {build}/pkg/",
        f"cp scripts/* {build}/scripts/",
    ]
    resources = Path(resources_root or ".") / PRODUCTBUILD_RESOURCES
    if resources.is_dir():
        commands.append(f"cp -r {PRODUCTBUILD_RESOURCES}/* {build}/")
    else:
        logger.debug("No %s directory, skipping", resources)
    return commands


def unpack(profile: PlatformProfile, project: ProjectMetadata, config: PipelineConfig) -> list[str]:
    """Extract the project tarball into the staged root."""
    tar = profile.tool("tar")
    return [
        f"gunzip -c {project.staged_name}.tar.gz | '{tar}' "
        f"-C '{staged_root(profile, project)}' --strip-components 1 -xf -"
    ]


def bill_of_materials_shim(
    profile: PlatformProfile, project: ProjectMetadata, config: PipelineConfig
) -> list[str]:
    """Move bill-of-materials into a docdir when nothing else delivered it.

    Older builds relied on this default placement.
    """
    if project.bill_of_materials_present:
        return []
    root = staged_root(profile, project)
    docdir = f"{root}/usr/local/share/doc/{project.name}"
    return [
        f"mkdir -p {docdir}",
        f"mv {root}/bill-of-materials {docdir}/bill-of-materials",
    ]


def extra_file_signing(
    profile: PlatformProfile, project: ProjectMetadata, config: PipelineConfig
) -> list[str]:
    """Sign files the project lists explicitly, locally or remotely."""
    if not config.force_signing or not project.extra_files_to_sign:
        return []
    source_dir = f"/{profile.os_name}/build/root/{project.staged_name}"
    return sign_extra_files(project, profile.mktemp, source_dir)


def binary_signing(
    profile: PlatformProfile, project: ProjectMetadata, config: PipelineConfig
) -> list[str]:
    """codesign, then verify, everything the platform signing table covers."""
    if not config.force_signing or not profile.signing_table:
        return []

    build = build_dir(profile)
    root = f"root/{project.staged_name}"
    codesign = profile.tool("codesign")
    targets = [
        (build + "/" + t.path.replace("{root}", root), t.pattern)
        for t in profile.signing_table
    ]

    commands = [UNLOCK_KEYCHAIN]
    commands += [
        f"find {path} -name '{pattern}' -type f -exec {codesign} --timestamp "
        f"--options runtime --keychain $$SIGNING_KEYCHAIN "
        f'-vfs "$$APPLICATION_SIGNING_CERT" {{}} \\;'
        for path, pattern in targets
    ]
    commands += [
        f"find {path} -name '{pattern}' -type f -exec {codesign} "
        f"--verify --strict --verbose=2 {{}} \\;"
        for path, pattern in targets
    ]
    return commands


def package(profile: PlatformProfile, project: ProjectMetadata, config: PipelineConfig) -> list[str]:
    """Build the component package from the staged root."""
    build = build_dir(profile)
    return [
        f"(cd {build}/; {profile.tool('pkgbuild')} "
        f"--root root/{project.staged_name} "
        f"--scripts {build}/scripts "
        f"--identifier {project.identifier}.{project.name} "
        f"--version {project.version} "
        f"--preserve-xattr "
        f"--install-location / "
        f"payload/{naming.payload_file_name(project)})"
    ]


def build_installer(
    profile: PlatformProfile, project: ProjectMetadata, config: PipelineConfig
) -> list[str]:
    """Wrap the component package in a product installer."""
    build = build_dir(profile)
    return [
        f"(cd {build}/; {profile.tool('productbuild')} "
        f"--distribution {project.name}-installer.xml "
        f"--identifier {project.identifier}.{project.name}-installer "
        f"--package-path payload/ "
        f"--resources {build}/resources "
        f"--plugins {build}/plugins "
        f"{naming.installer_file_name(project)})"
    ]


def sign_installer(
    profile: PlatformProfile, project: ProjectMetadata, config: PipelineConfig
) -> list[str]:
    """Sign the installer into pkg/, or just move it there unsigned."""
    build = build_dir(profile)
    installer = naming.installer_file_name(project)
    if not config.force_signing:
        return [f"mv {build}/{installer} {build}/pkg/"]
    return [
        UNLOCK_KEYCHAIN,
        f"{profile.tool('productsign')} --keychain $$SIGNING_KEYCHAIN "
        f'--sign "$$INSTALLER_SIGNING_CERT" '
        f"{build}/{installer} {build}/pkg/{installer}",
        f"rm {build}/{installer}",
    ]


def archive(profile: PlatformProfile, project: ProjectMetadata, config: PipelineConfig) -> list[str]:
    """Create the disk image from pkg/."""
    return [
        f"(cd {build_dir(profile)}; {profile.tool('hdiutil')} create "
        f"-volname {project.staged_name} "
        f"-fs JHFS+ "
        f"-format UDBZ "
        f"-srcfolder pkg "
        f"dmg/{naming.package_file_name(project, profile)})"
    ]


def sign_archive(
    profile: PlatformProfile, project: ProjectMetadata, config: PipelineConfig
) -> list[str]:
    if not config.force_signing:
        return []
    dmg = _dmg(profile, project)
    codesign = profile.tool("codesign")
    return [
        UNLOCK_KEYCHAIN,
        f"cd {build_dir(profile)}",
        f'{codesign} --timestamp --keychain $$SIGNING_KEYCHAIN --sign "$$APPLICATION_SIGNING_CERT" {dmg}',
        f"{codesign} --verify --strict --verbose=2 {dmg}",
    ]


def notarize(profile: PlatformProfile, project: ProjectMetadata, config: PipelineConfig) -> list[str]:
    """Submit the dmg for notarization, staple the ticket, assess it."""
    if not config.force_signing or config.skip_notarization:
        return []
    dmg = _dmg(profile, project)
    xcrun = profile.tool("xcrun")
    return [
        UNLOCK_KEYCHAIN,
        f'{xcrun} notarytool submit {dmg} --keychain-profile "$$NOTARY_PROFILE" --wait',
        f"{xcrun} stapler staple {dmg}",
        f"{profile.tool('spctl')} --assess --type install --verbose {dmg}",
    ]


def publish(profile: PlatformProfile, project: ProjectMetadata, config: PipelineConfig) -> list[str]:
    """Copy the finished dmg to the output directory."""
    output = naming.output_directory(profile, project.repo)
    return [
        f"mkdir -p {output}",
        f"cp {_dmg(profile, project)} ./{output}",
    ]


# ── Composition ─────────────────────────────────────────────────


def build_osx_pipeline(
    profile: PlatformProfile,
    project: ProjectMetadata,
    config: PipelineConfig,
    *,
    resources_root: Path | None = None,
) -> CommandPipeline:
    """Compose every stage, in order, into a pipeline."""
    naming.check_metadata(project, naming.PACKAGE_FIELDS)

    stages: list[tuple[str, Stage]] = [
        ("scaffold", scaffold),
        ("stage_inputs", partial(stage_inputs, resources_root=resources_root)),
        ("unpack", unpack),
        ("bill_of_materials_shim", bill_of_materials_shim),
        ("extra_file_signing", extra_file_signing),
        ("binary_signing", binary_signing),
        ("package", package),
        ("build_installer", build_installer),
        ("sign_installer", sign_installer),
        ("archive", archive),
        ("sign_archive", sign_archive),
        ("notarize", notarize),
        ("publish", publish),
    ]

    pipeline = CommandPipeline(platform=profile.name, project=project.name)
    for name, stage in stages:
        pipeline.stages.append(PipelineStage(name=name, commands=stage(profile, project, config)))

    logger.info(
        "Built %s pipeline for %s: %d commands (%s)",
        profile.name,
        project.staged_name,
        len(pipeline.commands),
        ", ".join(pipeline.active_stages),
    )
    return pipeline


def install_build_dependencies(profile: PlatformProfile, dependencies: list[str]) -> str:
    """Shell snippet installing build dependencies with Homebrew.

    Homebrew refuses to run as root, so it runs as the ``test`` user.
    """
    brew = profile.tool("brew")
    return "\n".join([
        "mkdir -p /etc/homebrew",
        "cd /etc/homebrew",
        f"sudo su test -c '{brew} install {' '.join(dependencies)}'",
    ])
