"""Signing collaborators — local and remote extra-file signing."""

from buildplane.adapters.signing.extra_files import ExtraFilesSigner, sign_extra_files

__all__ = ["ExtraFilesSigner", "sign_extra_files"]
