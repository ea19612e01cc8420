"""
Shared test fixtures and configuration.
"""

import subprocess
from pathlib import Path

import pytest

from buildplane.core.models.platform import PlatformProfile
from buildplane.core.models.project import ProjectMetadata
from buildplane.core.services.pipeline.platforms import get_platform


def git(*args: str, cwd: Path) -> str:
    """Run git in *cwd* with a throwaway identity and return stdout."""
    result = subprocess.run(
        [
            "git",
            "-c", "user.name=Build Bot",
            "-c", "user.email=bot@example.com",
            "-c", "commit.gpgsign=false",
            "-c", "tag.gpgsign=false",
            *args,
        ],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def commit_file(repo: Path, name: str, content: str, message: str) -> None:
    (repo / name).write_text(content)
    git("add", name, cwd=repo)
    git("commit", "-q", "-m", message, cwd=repo)


@pytest.fixture
def make_remote(tmp_path: Path):
    """Factory: create a local repository to use as a remote.

    ``make_remote("tool", tags=["v1.0.0"])`` returns the repo path.
    """

    def _make(name: str = "tool", tags: list[str] | None = None) -> Path:
        repo = tmp_path / "remotes" / name
        repo.mkdir(parents=True)
        git("init", "-q", "-b", "main", cwd=repo)
        commit_file(repo, "README", "hello\n", "initial")
        for tag in tags or []:
            git("tag", tag, cwd=repo)
        return repo

    return _make


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Empty directory sources are cloned into."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def profile() -> PlatformProfile:
    return get_platform("osx-15-arm64")


@pytest.fixture
def project() -> ProjectMetadata:
    return ProjectMetadata(name="acme", version="1.2.3", release="1", identifier="com.acme")


@pytest.fixture
def run_git():
    """The ``git`` helper, for tests that shape repositories by hand."""
    return git


@pytest.fixture
def commit():
    return commit_file
