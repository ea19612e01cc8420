"""
Remote URL classification — live repository vs. static archive.

GitHub serves clone endpoints and archive downloads from URLs that look
almost the same.  Probing every one of them over the network is slow and
runs into rate limits, so we decide from the shape of the path instead:

    https://github.com/<owner>/<repo>                      → live repository
    https://github.com/<owner>/<repo>/archive/v1.tar.gz    → static archive
    https://github.com/<owner>/<repo>/releases/download/…  → static archive

See GitHub's documentation on downloading source code archives for the
media types recognized here.
"""

from __future__ import annotations

from enum import Enum

GITHUB_URL_PREFIX = "https://github.com/"

# [owner, repo, media_type, ref] — media_type values that mean "download"
ARCHIVE_PATH_TYPES = frozenset({"archive", "releases", "tarball", "zipball"})
ARCHIVE_SUFFIXES = (".tar.gz", ".zip")


class RemoteKind(str, Enum):
    """What a remote URL points at."""

    LIVE_REPOSITORY = "live_repository"
    STATIC_ARCHIVE = "static_archive"


def is_github_url(url: object) -> bool:
    """Whether *url* sits under the GitHub web prefix."""
    return str(url).startswith(GITHUB_URL_PREFIX)


def classify(url: object) -> RemoteKind:
    """Classify *url* as a live repository or a static archive download.

    Only the path shape is inspected; no network access happens here.
    URLs with fewer than three path segments are live repositories.
    """
    url_directory = str(url).removeprefix(GITHUB_URL_PREFIX)
    components = url_directory.split("/")

    media_type = components[2] if len(components) > 2 else None
    last = components[-1]

    if media_type in ARCHIVE_PATH_TYPES or last.endswith(ARCHIVE_SUFFIXES):
        return RemoteKind.STATIC_ARCHIVE
    return RemoteKind.LIVE_REPOSITORY


def is_github_remote(url: object) -> bool:
    """Whether *url* is a GitHub URL that can be cloned."""
    return is_github_url(url) and classify(url) is RemoteKind.LIVE_REPOSITORY
