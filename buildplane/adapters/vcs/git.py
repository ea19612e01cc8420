"""
Git source — validate, fetch, check out and version a remote repository.

Uses the git CLI through ``subprocess`` — never a git library.  Every
git failure is translated into the ``GitError`` family; raw process
errors never leak to the caller.

Messages that name the remote use ``log_url`` (host + path).  The raw
URL may embed credentials and is only ever handed to git itself.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from pathlib import Path, PurePosixPath
from urllib.parse import SplitResult, urlsplit

from buildplane.adapters.vcs.remote import is_github_remote, is_github_url
from buildplane.core.config import settings
from buildplane.core.errors import (
    CheckoutFailed,
    ConfigError,
    FetchFailed,
    InvalidRepo,
)
from buildplane.core.observability.logging_config import scrub_credentials

logger = logging.getLogger(__name__)

_UNSET = object()


def log_safe_url(url: SplitResult) -> str:
    """Host + path of *url*, with any credentials dropped."""
    if url.hostname:
        try:
            port = url.port
        except ValueError:
            port = None
        host = f"{url.hostname}:{port}" if port else url.hostname
        return host + url.path
    # scp-like (git@host:org/repo.git) and plain paths
    return url.path.rsplit("@", 1)[-1]


def _git_env() -> dict[str, str]:
    # Never let git block on a credential prompt
    return {**os.environ, "GIT_TERMINAL_PROMPT": "0"}


def _kill_process_group(proc: subprocess.Popen) -> None:
    """Kill *proc* and every helper it spawned (remote-https, ssh)."""
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    proc.wait()


class GitSource:
    """A component's source, living in a remote git repository.

    The remote is validated when the object is built, so an unusable
    URL fails before any clone is attempted.

    Attributes:
        url:           Parsed remote URL.
        log_url:       Host + path of the remote, safe to print.
        ref:           Branch, tag or sha to check out.
        workdir:       Absolute, symlink-free directory clones live in.
        clone_options: Extra ``git clone`` flags (``{"depth": "1"}``).
    """

    def __init__(
        self,
        url: str,
        workdir: str | Path,
        *,
        ref: str | None = "HEAD",
        dirname: str | None = None,
        clone_options: dict[str, object] | None = None,
        probe_timeout: float | None = None,
    ):
        try:
            self.workdir = Path(workdir).resolve(strict=True)
        except (FileNotFoundError, RuntimeError) as e:
            raise ConfigError(f"Working directory does not exist: {workdir}") from e

        self._remote = str(url)
        self.url = urlsplit(self._remote)
        self.log_url = log_safe_url(self.url)
        self.ref = ref or "HEAD"
        self._dirname = dirname
        self.clone_options = dict(clone_options or {})
        self._version: object = _UNSET

        if not self.validate_remote(self._remote, probe_timeout):
            raise InvalidRepo(
                f"'{self.log_url}' is not a valid Git repo", log_url=self.log_url
            )

    def __repr__(self) -> str:
        return f"<GitSource {self.log_url!r} ref={self.ref!r}>"

    # ── Remote validation ───────────────────────────────────────

    @staticmethod
    def validate_remote(url: object, timeout: float | None = None) -> bool:
        """Guess whether *url* is a reachable git repository.

        GitHub URLs are judged by their shape alone, to stay clear of
        GitHub's rate limiting.  Anything else gets a ``git ls-remote``
        probe bounded by *timeout* seconds (``None`` = configured
        default).  A timeout kills the probe together with any helper
        processes git started, and counts as invalid.
        """
        if is_github_url(url):
            return is_github_remote(url)

        if timeout is None:
            timeout = settings.probe_timeout()

        try:
            proc = subprocess.Popen(
                [settings.git_executable(), "ls-remote", "--heads", str(url)],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                env=_git_env(),
                start_new_session=True,
            )
        except OSError as e:
            logger.debug("Remote probe could not run: %s", e)
            return False

        try:
            returncode = proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.debug("Remote probe timed out after %ss", timeout)
            _kill_process_group(proc)
            return False
        return returncode == 0

    # ── Layout ──────────────────────────────────────────────────

    @property
    def dirname(self) -> str:
        """Directory name the repository is cloned into."""
        if self._dirname:
            return self._dirname
        return PurePosixPath(self.url.path).name.removesuffix(".git")

    @property
    def clone_dir(self) -> Path:
        return self.workdir / self.dirname

    def cleanup(self) -> str:
        """Shell command that removes the cloned source directory."""
        return f"rm -rf {self.dirname}"

    def verify(self) -> None:
        # There is no checksum to verify for a git checkout.
        logger.info(
            "Nothing to verify for '%s' (using Git reference '%s')",
            self.dirname,
            self.ref,
        )

    # ── Fetch / checkout ────────────────────────────────────────

    def fetch(self) -> str | None:
        """Clone or update the repository, check out ``ref``, return the version.

        An existing clone is updated in place.  A clone that exists but
        cannot be updated raises ``FetchFailed`` rather than being
        thrown away and cloned again.
        """
        if self._is_clone():
            logger.info("Fetching updates for '%s' from '%s'", self.dirname, self.log_url)
            result = self._git("fetch", "--tags", cwd=self.clone_dir)
            if result.returncode != 0:
                self._log_stderr(result)
                raise FetchFailed(
                    f"Unable to fetch updates for '{self.dirname}' from '{self.log_url}'",
                    log_url=self.log_url,
                )
        else:
            self._clone()

        self.checkout()
        self.invalidate_version()
        return self.version

    def checkout(self, ref: str | None = None) -> None:
        """Check out *ref* (default: ``self.ref``) in the local clone."""
        ref = ref or self.ref
        logger.info("Checking out '%s' from Git repo '%s'", ref, self.dirname)
        result = self._git("checkout", "--quiet", ref, cwd=self.clone_dir)
        if result.returncode != 0:
            self._log_stderr(result)
            raise CheckoutFailed(
                f"unable to checkout {ref} from '{self.log_url}'",
                ref=ref,
                log_url=self.log_url,
            )
        if ref != self.ref:
            self.ref = ref
            self.invalidate_version()

    # ── Version ─────────────────────────────────────────────────

    @property
    def version(self) -> str | None:
        """Nearest tag description of ``ref``, computed once.

        ``None`` when nothing reachable from ``ref`` is tagged.
        """
        if self._version is _UNSET:
            self._version = self._describe()
        return self._version  # type: ignore[return-value]

    def invalidate_version(self) -> None:
        """Forget the cached version so the next read describes again."""
        self._version = _UNSET

    def _describe(self) -> str | None:
        result = self._git("describe", "--tags", self.ref, cwd=self.clone_dir)
        if result.returncode != 0:
            logger.info(
                "Directory '%s' cannot be versioned by Git. "
                "Maybe it hasn't been tagged yet?",
                self.dirname,
            )
            return None
        return result.stdout.strip() or None

    # ── Refs ────────────────────────────────────────────────────

    def remote_refs(self) -> list[str]:
        """Branch and tag names advertised by the remote."""
        result = self._git("ls-remote", "--heads", "--tags", self._remote, cwd=self.workdir)
        if result.returncode != 0:
            self._log_stderr(result)
            raise InvalidRepo(
                f"Unable to list refs from '{self.log_url}'", log_url=self.log_url
            )
        names: list[str] = []
        for line in result.stdout.splitlines():
            _, _, refname = line.partition("\t")
            if not refname or refname.endswith("^{}"):
                continue
            name = refname.removeprefix("refs/heads/").removeprefix("refs/tags/")
            if name not in names:
                names.append(name)
        return names

    def refs(self) -> list[str]:
        """Tag and branch names in the local clone."""
        result = self._git(
            "for-each-ref",
            "--format=%(refname)",
            "refs/tags",
            "refs/heads",
            cwd=self.clone_dir,
        )
        if result.returncode != 0:
            return []
        names: list[str] = []
        for refname in result.stdout.split():
            name = refname.removeprefix("refs/heads/").removeprefix("refs/tags/")
            if name not in names:
                names.append(name)
        return names

    # ── Helpers ─────────────────────────────────────────────────

    def _is_clone(self) -> bool:
        """Whether ``clone_dir`` is the top level of a git work tree."""
        if not self.clone_dir.is_dir():
            return False
        result = self._git("rev-parse", "--show-toplevel", cwd=self.clone_dir)
        if result.returncode != 0:
            return False
        return Path(result.stdout.strip()).resolve() == self.clone_dir.resolve()

    def _clone(self) -> None:
        logger.info("Cloning Git repo '%s'", self.log_url)
        result = self._git(
            "clone",
            *self._clone_flags(),
            self._remote,
            self.dirname,
            cwd=self.workdir,
        )
        if result.returncode != 0:
            self._log_stderr(result)
            raise InvalidRepo(
                f"Unable to clone from '{self.log_url}'", log_url=self.log_url
            )
        logger.info("Successfully cloned '%s'", self.dirname)

    def _clone_flags(self) -> list[str]:
        """Translate ``clone_options`` into ``git clone`` flags."""
        flags: list[str] = []
        for key, value in self.clone_options.items():
            flag = "--" + str(key).replace("_", "-")
            if value is True:
                flags.append(flag)
            elif value is False or value is None:
                continue
            elif isinstance(value, (list, tuple)):
                flags.extend(f"{flag}={v}" for v in value)
            else:
                flags.append(f"{flag}={value}")
        return flags

    def _git(self, *args: str, cwd: Path) -> subprocess.CompletedProcess[str]:
        """Run a git command and return the result (never raises)."""
        command = [settings.git_executable(), *args]
        logger.debug("git %s (cwd=%s)", scrub_credentials(" ".join(args)), cwd)
        try:
            return subprocess.run(
                command,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                env=_git_env(),
                stdin=subprocess.DEVNULL,
            )
        except OSError as e:
            return subprocess.CompletedProcess(command, 127, "", str(e))

    @staticmethod
    def _log_stderr(result: subprocess.CompletedProcess[str]) -> None:
        stderr = (result.stderr or "").strip()
        if stderr:
            logger.debug("git: %s", scrub_credentials(stderr))
