"""CLI entry point for depwalk."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from depwalk.config import load_config
from depwalk.deps import installation_helpers
from depwalk.errors import ConfigError, ResolutionError
from depwalk.graph import DependencyResolver
from depwalk.manifests import LocalBuckets
from depwalk.models import ARCHITECTURES, ManifestInformation
from depwalk.pipeline import plan_installation


def _parse_bucket(value: str) -> tuple[str, Path]:
    name, sep, path = value.partition("=")
    if not sep or not name or not path:
        raise click.BadParameter(f"expected NAME=PATH, got {value!r}", param_hint="--bucket")
    return name, Path(path)


def _describe(info: ManifestInformation) -> str:
    where = f" [{info.bucket}]" if info.bucket else ""
    tag = " (dependency)" if info.is_dependency else ""
    return f"{info.application_name} {info.version or '?'}{where}{tag}"


@click.group()
@click.version_option(package_name="depwalk")
@click.option(
    "--buckets-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default="buckets",
    show_default=True,
    envvar="DEPWALK_BUCKETS",
    help="Directory whose subdirectories are buckets.",
)
@click.option(
    "-b",
    "--bucket",
    "bucket_specs",
    multiple=True,
    metavar="NAME=PATH",
    help="Add a bucket explicitly (repeatable; searched before --buckets-dir).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: $DEPWALK_CONFIG or ~/.config/depwalk/config.toml).",
)
@click.option(
    "-a",
    "--arch",
    type=click.Choice(ARCHITECTURES),
    default="64bit",
    show_default=True,
    help="Target architecture.",
)
@click.option(
    "-i",
    "--installed",
    multiple=True,
    metavar="NAME",
    help="Treat a helper or application as already installed (repeatable).",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
@click.pass_context
def cli(
    ctx: click.Context,
    buckets_dir: Path,
    bucket_specs: tuple[str, ...],
    config_path: Path | None,
    arch: str,
    installed: tuple[str, ...],
    verbose: bool,
) -> None:
    """Compute install order for packages described by JSON manifests."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    buckets = dict(_parse_bucket(spec) for spec in bucket_specs)
    for name, path in LocalBuckets.from_root(buckets_dir).buckets.items():
        buckets.setdefault(name, path)

    installed_names = {name.lower() for name in installed}
    ctx.obj = {
        "arch": arch,
        "installed": installed_names,
        "resolver": DependencyResolver(
            LocalBuckets(buckets),
            config=config,
            is_helper_installed=installed_names.__contains__,
        ),
    }


@cli.command()
@click.argument("queries", nargs=-1, required=True)
@click.pass_obj
def plan(obj: dict, queries: tuple[str, ...]) -> None:
    """Print the install queue for one or more applications."""
    installed: set[str] = obj["installed"]
    result = plan_installation(
        queries, obj["arch"], obj["resolver"], is_app_installed=installed.__contains__
    )

    for position, info in enumerate(result.queue, start=1):
        click.echo(f"{position:>3}. {_describe(info)}")
    for conflict in result.version_conflicts:
        click.echo(
            f"note: {conflict.required_by} wants {conflict.application_name}"
            f" {conflict.newer_version}, keeping {conflict.queued_version}"
        )
    for failure in result.failures:
        click.echo(f"error: {failure.message}", err=True)

    if result.failures:
        raise SystemExit(1)


@cli.command()
@click.argument("query")
@click.pass_obj
def deps(obj: dict, query: str) -> None:
    """Print the dependencies of one application in install order."""
    resolver: DependencyResolver = obj["resolver"]
    try:
        closure = resolver.resolve(resolver.lookup(query), obj["arch"])
    except ResolutionError as exc:
        raise click.ClickException(str(exc)) from exc

    if not closure:
        click.echo(f"{query} has no dependencies.")
    for info in closure:
        click.echo(_describe(info))


@cli.command()
@click.argument("query")
@click.option("--all", "include_installed", is_flag=True, help="Include installed helpers.")
@click.pass_obj
def helpers(obj: dict, query: str, include_installed: bool) -> None:
    """Print the extraction helpers one application needs."""
    resolver: DependencyResolver = obj["resolver"]
    info = resolver.lookup(query)
    if info.manifest is None:
        raise click.ClickException(f"Couldn't find manifest for '{query}'.")

    found = installation_helpers(
        info.manifest,
        obj["arch"],
        config=resolver.config,
        is_helper_installed=resolver.is_helper_installed,
        include_installed=include_installed,
    )
    for name in found:
        click.echo(name)
