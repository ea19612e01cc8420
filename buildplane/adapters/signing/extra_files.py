"""
Extra-file signing — commands that sign files a project lists explicitly.

Two interchangeable strategies:

    local   run the project's signing command on each file in place
    remote  ship each file to a signing host, sign it there, ship it back

Both return plain command strings (one per file) for the driver's
task runner; nothing is executed here.  Strings target a Makefile
recipe, so shell variables are written ``$$var``.
"""

from __future__ import annotations

import logging
import posixpath
import shlex

from buildplane.core.errors import MalformedMetadata
from buildplane.core.models.project import ProjectMetadata

logger = logging.getLogger(__name__)

SSH_COMMAND = "ssh -o StrictHostKeyChecking=no -o UserKnownHostsFile=/dev/null"

_RSYNC_FLAGS = (
    "--verbose --recursive --hard-links --links "
    "--no-perms --no-owner --no-group --extended-attributes"
)


class ExtraFilesSigner:
    """Builds signing commands for ``project.extra_files_to_sign``."""

    @staticmethod
    def _local_path(source_dir: str, file: str) -> str:
        return posixpath.join("$(tempdir)", source_dir.lstrip("/"), file.lstrip("/"))

    @classmethod
    def local_commands(
        cls, project: ProjectMetadata, mktemp: str, source_dir: str
    ) -> list[str]:
        """Sign each file on the build host itself."""
        if not project.extra_files_to_sign:
            return []
        if not project.signing_command:
            raise MalformedMetadata(
                f"Project '{project.name}' lists files to sign but no signing_command"
            )
        return [
            f"{project.signing_command} {cls._local_path(source_dir, file)}"
            for file in project.extra_files_to_sign
        ]

    @classmethod
    def commands(
        cls, project: ProjectMetadata, mktemp: str, source_dir: str
    ) -> list[str]:
        """Round-trip each file through the remote signing host.

        Each command allocates a temp dir on the signer with *mktemp*,
        copies the file over, signs it, copies it back and cleans up.
        """
        if not project.extra_files_to_sign:
            return []
        if not project.signing_hostname or not project.signing_command:
            raise MalformedMetadata(
                f"Project '{project.name}' needs signing_hostname and "
                "signing_command for remote signing"
            )

        host = project.signing_hostname
        if project.signing_username:
            host = f"{project.signing_username}@{host}"
        rsync = f"rsync -e '{SSH_COMMAND}' {_RSYNC_FLAGS}"

        commands = []
        for file in project.extra_files_to_sign:
            local = cls._local_path(source_dir, file)
            base = posixpath.basename(file.rstrip("/"))
            sign = shlex.quote(f"{project.signing_command} $$tmp/{base}")
            commands.append(
                f"tmp=$$({SSH_COMMAND} {host} {shlex.quote(mktemp)}) && "
                f"{rsync} {local} {host}:$$tmp/ && "
                f"{SSH_COMMAND} {host} \"/bin/bash -c {sign}\" && "
                f"{rsync} {host}:$$tmp/{base} {local} && "
                f"{SSH_COMMAND} {host} \"rm -rf $$tmp\""
            )
        logger.debug(
            "Remote signing of %d file(s) through %s",
            len(commands),
            project.signing_hostname,
        )
        return commands


def sign_extra_files(
    project: ProjectMetadata, mktemp: str, source_dir: str
) -> list[str]:
    """Pick the local or remote strategy from ``project.use_local_signing``."""
    if project.use_local_signing:
        return ExtraFilesSigner.local_commands(project, mktemp, source_dir)
    return ExtraFilesSigner.commands(project, mktemp, source_dir)
