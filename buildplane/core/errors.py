"""
Error taxonomy — every failure the core raises on purpose.

Source-control failures carry the log-safe URL (host + path, never
credentials) so the driver can report them without re-deriving anything.
"""

from __future__ import annotations


class BuildplaneError(Exception):
    """Root of all errors raised by buildplane."""


class ConfigError(BuildplaneError):
    """Raised when build configuration is invalid or missing."""


class MalformedMetadata(BuildplaneError):
    """Raised when required project or platform metadata is unusable.

    This is a caller-contract violation (a bug in the driver or the
    configuration), not a recoverable runtime condition.
    """


# ── Source control ──────────────────────────────────────────────


class GitError(BuildplaneError):
    """Base class for git source failures."""

    def __init__(self, message: str, *, log_url: str = ""):
        super().__init__(message)
        self.log_url = log_url


class InvalidRepo(GitError):
    """The remote is not a reachable git repository, or cloning it failed."""


class CheckoutFailed(GitError):
    """Checking out a ref failed after the clone was opened or created."""

    def __init__(self, message: str, *, ref: str, log_url: str = ""):
        super().__init__(message, log_url=log_url)
        self.ref = ref


class FetchFailed(GitError):
    """An existing clone could not be updated from its remote."""
