"""
Build Plane — CLI entrypoint.

Usage:
    python -m buildplane.main --help
    python -m buildplane.main classify https://github.com/acme/tool
    python -m buildplane.main fetch --workdir build/src
    python -m buildplane.main pipeline --json
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from buildplane import __version__
from buildplane.core.observability.logging_config import level_from_flags, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="buildplane")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to build.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Build Plane — resolve sources and plan platform packaging."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=level_from_flags(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get("BUILDPLANE_LOG_FILE"),
        log_file_level=os.environ.get("BUILDPLANE_LOG_FILE_LEVEL"),
    )


def _load(ctx: click.Context):
    from buildplane.core.config.loader import ConfigError, load_build_config

    try:
        return load_build_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


@cli.command()
@click.argument("url")
@click.option("--probe", is_flag=True, help="Also check the remote is reachable.")
@click.option("--timeout", type=float, default=None, help="Probe timeout in seconds.")
def classify(url: str, probe: bool, timeout: float | None) -> None:
    """Classify URL as a live repository or a static archive."""
    from buildplane.adapters.vcs.git import GitSource
    from buildplane.adapters.vcs.remote import classify as classify_url

    click.echo(classify_url(url).value)
    if probe:
        valid = GitSource.validate_remote(url, timeout)
        click.echo("reachable" if valid else "unreachable")
        if not valid:
            sys.exit(1)


@cli.command()
@click.option(
    "--workdir",
    "-w",
    type=click.Path(file_okay=False),
    default="build/src",
    show_default=True,
    help="Directory sources are cloned into.",
)
@click.option("--component", "components", multiple=True, help="Only fetch these components.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def fetch(ctx: click.Context, workdir: str, components: tuple[str, ...], as_json: bool) -> None:
    """Clone or update every component source and report versions."""
    from buildplane.core.use_cases.fetch import fetch_sources

    config = _load(ctx)
    report = fetch_sources(config, Path(workdir), components=list(components) or None)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        for c in report.components:
            if c.ok:
                version = c.version or "(unversioned)"
                click.echo(f"  ✓ {c.name} @ {c.ref} → {version}")
            else:
                click.secho(f"  ✗ {c.name}: {c.error}", fg="red")

    if not report.ok:
        sys.exit(1)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--force-signing/--no-force-signing", default=None, help="Override BUILDPLANE_FORCE_SIGNING.")
@click.option("--no-notarize", is_flag=True, help="Skip notarization.")
@click.option("--package-version", "version", default=None, help="Package at this version.")
@click.option(
    "--resources-root",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding resources/ (default: cwd).",
)
@click.pass_context
def pipeline(
    ctx: click.Context,
    as_json: bool,
    force_signing: bool | None,
    no_notarize: bool,
    version: str | None,
    resources_root: str | None,
) -> None:
    """Print the packaging command sequence, one command per line."""
    from buildplane.core.models.pipeline import PipelineConfig
    from buildplane.core.use_cases.package import plan_package

    config = _load(ctx)
    env = PipelineConfig.from_env()
    pipeline_config = PipelineConfig(
        force_signing=env.force_signing if force_signing is None else force_signing,
        skip_notarization=env.skip_notarization or no_notarize,
    )

    plan = plan_package(
        config,
        pipeline_config,
        resources_root=Path(resources_root) if resources_root else None,
        version=version,
    )

    if as_json:
        click.echo(json.dumps(plan.to_dict(), indent=2))
        if plan.error:
            sys.exit(1)
        return

    if plan.error:
        click.secho(f"❌ {plan.error}", fg="red", err=True)
        sys.exit(1)

    assert plan.pipeline is not None
    for command in plan.pipeline.commands:
        click.echo(command)


@cli.command()
@click.option(
    "--workdir",
    "-w",
    type=click.Path(file_okay=False),
    required=True,
    help="Directory to write the packaging inputs into.",
)
@click.pass_context
def artifacts(ctx: click.Context, workdir: str) -> None:
    """Write the installer descriptor, install scripts and uninstaller."""
    from buildplane.core.errors import BuildplaneError
    from buildplane.core.use_cases.package import write_packaging_artifacts

    config = _load(ctx)
    try:
        written = write_packaging_artifacts(config, Path(workdir))
    except BuildplaneError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if not ctx.obj.get("quiet"):
        for path in written:
            click.echo(f"  📄 {path}")


@cli.command("platforms")
def list_platforms_cmd() -> None:
    """List the known target platforms."""
    from buildplane.core.services.pipeline.platforms import list_platforms

    for name in list_platforms():
        click.echo(name)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
