"""
Project model — what is being packaged.

Supplied by the component/project description and read-only to the
pipeline builder.  Field contents are checked where they are used
(see ``buildplane.core.services.naming.check_metadata``).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProjectMetadata(BaseModel):
    """Identity and packaging switches of a project.

    ``name``, ``version`` and ``release`` are enough for artifact names.
    Building a pipeline or installer inputs also needs ``identifier``;
    without it those raise ``MalformedMetadata``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    release: str = "1"
    identifier: str = ""                   # reverse-DNS, e.g. com.acme
    extra_files_to_sign: tuple[str, ...] = ()
    use_local_signing: bool = False
    bill_of_materials_present: bool = False
    repo: str | None = None                # output directory override

    # Remote signing host (used when use_local_signing is False)
    signing_hostname: str = ""
    signing_username: str = ""
    signing_command: str = ""

    description: str = ""
    homepage: str = ""
    vendor: str = ""
    build_dependencies: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def staged_name(self) -> str:
        """``<name>-<version>``, the staged root and volume name."""
        return f"{self.name}-{self.version}"
