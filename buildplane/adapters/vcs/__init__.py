"""Version control sources."""

from buildplane.adapters.vcs.git import GitSource
from buildplane.adapters.vcs.remote import RemoteKind, classify

__all__ = ["GitSource", "RemoteKind", "classify"]
