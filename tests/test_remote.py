"""
Tests for remote URL classification — live repository vs. static archive.
"""

import pytest

from buildplane.adapters.vcs.remote import (
    RemoteKind,
    classify,
    is_github_remote,
    is_github_url,
)


class TestClassify:
    def test_repository_root_is_live(self):
        assert classify("https://github.com/acme/tool") is RemoteKind.LIVE_REPOSITORY

    def test_dot_git_is_live(self):
        assert classify("https://github.com/acme/tool.git") is RemoteKind.LIVE_REPOSITORY

    def test_archive_tarball_is_static(self):
        url = "https://github.com/acme/tool/archive/v1.tar.gz"
        assert classify(url) is RemoteKind.STATIC_ARCHIVE

    @pytest.mark.parametrize("media_type", ["archive", "releases", "tarball", "zipball"])
    def test_media_type_segment_is_static(self, media_type):
        url = f"https://github.com/acme/tool/{media_type}/v1"
        assert classify(url) is RemoteKind.STATIC_ARCHIVE

    def test_zip_suffix_is_static(self):
        assert classify("https://github.com/acme/tool/blob/main/dist.zip") is RemoteKind.STATIC_ARCHIVE

    def test_tree_path_is_live(self):
        """Only the documented media types count, not any third segment."""
        assert classify("https://github.com/acme/tool/tree/main") is RemoteKind.LIVE_REPOSITORY

    def test_media_type_elsewhere_does_not_count(self):
        assert classify("https://github.com/archive/tool") is RemoteKind.LIVE_REPOSITORY

    @pytest.mark.parametrize(
        "url",
        ["https://github.com/", "https://github.com/acme", "https://github.com/acme/tool/"],
    )
    def test_short_paths_do_not_raise(self, url):
        assert classify(url) is RemoteKind.LIVE_REPOSITORY

    def test_non_github_url_uses_same_shape(self):
        assert classify("https://example.com/files/src/tool-1.0.tar.gz") is RemoteKind.STATIC_ARCHIVE


class TestGithubHelpers:
    def test_is_github_url(self):
        assert is_github_url("https://github.com/acme/tool")
        assert not is_github_url("https://gitlab.com/acme/tool")
        assert not is_github_url("git@github.com:acme/tool.git")

    def test_is_github_remote(self):
        assert is_github_remote("https://github.com/acme/tool")
        assert not is_github_remote("https://github.com/acme/tool/zipball/main")
        assert not is_github_remote("https://example.com/acme/tool")
