"""
Tests for CLI commands — classify, pipeline, fetch, artifacts, global options.
"""

import json
import shutil
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from buildplane.main import cli


def _write_build(tmp_path: Path, components: str = "") -> Path:
    content = textwrap.dedent("""\
        platform: osx-15-arm64
        project:
          name: acme
          version: 1.2.3
          release: "1"
          identifier: com.acme
    """) + components
    path = tmp_path / "build.yml"
    path.write_text(content)
    return path


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Build Plane" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_platforms(self):
        result = CliRunner().invoke(cli, ["platforms"])
        assert result.exit_code == 0
        assert "osx-15-arm64" in result.output.splitlines()


class TestClassifyCommand:
    def test_live(self):
        result = CliRunner().invoke(cli, ["classify", "https://github.com/acme/tool"])
        assert result.exit_code == 0
        assert result.output.strip() == "live_repository"

    def test_archive(self):
        result = CliRunner().invoke(cli, ["classify", "https://github.com/acme/tool/archive/v1.tar.gz"])
        assert result.output.strip() == "static_archive"

    def test_probe_unreachable(self, tmp_path: Path):
        url = (tmp_path / "nope").as_uri()
        result = CliRunner().invoke(cli, ["classify", "--probe", "--timeout", "10", url])
        assert result.exit_code == 1
        assert "unreachable" in result.output


class TestPipelineCommand:
    def test_prints_commands(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("BUILDPLANE_FORCE_SIGNING", raising=False)
        config = _write_build(tmp_path)
        result = CliRunner().invoke(cli, ["--config", str(config), "pipeline"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[-1] == "cp $(tempdir)/osx/build/dmg/acme-1.2.3-1.osx15.dmg ./output/osx/15/arm64"
        assert not any("codesign" in line for line in lines)

    def test_force_signing_flag(self, tmp_path: Path):
        config = _write_build(tmp_path)
        result = CliRunner().invoke(
            cli, ["--config", str(config), "pipeline", "--force-signing", "--no-notarize"]
        )
        assert result.exit_code == 0
        assert "productsign" in result.output
        assert "notarytool" not in result.output

    def test_force_signing_from_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("BUILDPLANE_FORCE_SIGNING", "true")
        config = _write_build(tmp_path)
        result = CliRunner().invoke(cli, ["--config", str(config), "pipeline"])
        assert "notarytool" in result.output

    def test_json(self, tmp_path: Path):
        config = _write_build(tmp_path)
        result = CliRunner().invoke(
            cli, ["--config", str(config), "pipeline", "--json", "--package-version", "2.0.0"]
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["package_file"] == "acme-2.0.0-1.osx15.dmg"
        assert "publish" in data["stages"]

    def test_missing_config(self, tmp_path: Path):
        result = CliRunner().invoke(cli, ["--config", str(tmp_path / "nope.yml"), "pipeline"])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestArtifactsCommand:
    def test_writes_files(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = _write_build(tmp_path)
        result = CliRunner().invoke(
            cli, ["--config", str(config), "artifacts", "--workdir", str(tmp_path / "pkgwork")]
        )
        assert result.exit_code == 0
        assert (tmp_path / "pkgwork" / "acme-uninstaller.tool").is_file()


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
class TestFetchCommand:
    def test_fetch(self, tmp_path: Path, make_remote):
        remote = make_remote("tool", tags=["v1.0.0"])
        config = _write_build(tmp_path, textwrap.dedent(f"""\
            components:
              - name: tool
                url: {remote.as_uri()}
        """))
        result = CliRunner().invoke(
            cli, ["--config", str(config), "fetch", "--workdir", str(tmp_path / "src")]
        )
        assert result.exit_code == 0
        assert "tool @ HEAD → v1.0.0" in result.output

    def test_fetch_failure_exit_code(self, tmp_path: Path):
        config = _write_build(tmp_path, textwrap.dedent(f"""\
            components:
              - name: ghost
                url: {(tmp_path / "ghost").as_uri()}
        """))
        result = CliRunner().invoke(
            cli, ["--config", str(config), "fetch", "--workdir", str(tmp_path / "src"), "--json"]
        )
        assert result.exit_code == 1
        assert '"ok": false' in result.output
