"""
Process-wide settings read from the environment.

Only entry points (CLI, use cases) call these.  Core builders receive
the values as explicit arguments and never look at ``os.environ``.

Variables:
    BUILDPLANE_GIT              git executable (default: ``git``)
    BUILDPLANE_PROBE_TIMEOUT    seconds allowed for a remote probe (default: 60)
    BUILDPLANE_FORCE_SIGNING    enable code signing + notarization stages
    BUILDPLANE_NO_NOTARIZE      skip notarization even when signing
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

ENV_PREFIX = "BUILDPLANE_"

DEFAULT_GIT = "git"
DEFAULT_PROBE_TIMEOUT = 60.0

_FALSE_VALUES = frozenset({"", "0", "false", "no", "off"})


def env_flag(name: str) -> bool:
    """Read a boolean toggle.  Unset, empty, 0/false/no/off mean off."""
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None:
        return False
    return raw.strip().lower() not in _FALSE_VALUES


def git_executable() -> str:
    """The git binary used for every source-control command."""
    return os.environ.get(ENV_PREFIX + "GIT") or DEFAULT_GIT


def probe_timeout() -> float:
    """Default bound, in seconds, for a remote validation probe."""
    raw = os.environ.get(ENV_PREFIX + "PROBE_TIMEOUT")
    if not raw:
        return DEFAULT_PROBE_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %sPROBE_TIMEOUT=%r", ENV_PREFIX, raw)
        return DEFAULT_PROBE_TIMEOUT
    return max(value, 0.0)
